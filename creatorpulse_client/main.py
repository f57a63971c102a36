"""
Command-line entry point that drives the API service against the demo
dataset and prints the response envelopes.
"""
import asyncio
import json
from typing import Any, Dict, List, Optional

from creatorpulse_client.core.config import Settings, get_settings
from creatorpulse_client.core.logging import configure_logging, get_logger
from creatorpulse_client.services.facade import ApiService, create_api_service
from creatorpulse_client.services.seed_data import DEMO_EMAIL
from creatorpulse_client.services.entity_store import DEFAULT_PASSWORD


logger = get_logger(__name__)


async def run_demo(service: ApiService) -> List[Dict[str, Any]]:
    """Log in as the demo user and walk the main dashboard reads."""
    results = []

    login = await service.login(DEMO_EMAIL, DEFAULT_PASSWORD)
    results.append({"operation": "login", **login.to_dict()})
    if not login.success:
        logger.warning("Demo login failed", error_code=login.error.code)
        return results

    for operation in ("get_sources", "get_drafts", "get_training_status", "get_dashboard_stats"):
        response = await getattr(service, operation)()
        results.append({"operation": operation, **response.to_dict()})

    logout = await service.logout()
    results.append({"operation": "logout", **logout.to_dict()})
    return results


async def _main(settings: Optional[Settings] = None) -> List[Dict[str, Any]]:
    settings = settings or get_settings()
    service = create_api_service(settings)
    try:
        return await run_demo(service)
    finally:
        await service.aclose()


def main() -> None:
    settings = get_settings()
    configure_logging(settings)
    logger.info("Starting CreatorPulse demo", environment=settings.environment)

    results = asyncio.run(_main(settings))
    print(json.dumps(results, indent=2))


if __name__ == "__main__":
    main()
