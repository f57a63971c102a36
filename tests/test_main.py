"""
Test the demo entry point.
"""
from creatorpulse_client.main import run_demo


async def test_run_demo(api):
    """The demo walks login, the dashboard reads and logout."""
    results = await run_demo(api)

    assert [r["operation"] for r in results] == [
        "login",
        "get_sources",
        "get_drafts",
        "get_training_status",
        "get_dashboard_stats",
        "logout",
    ]
    assert all(r["success"] is True for r in results)
    assert results[2]["data"]["total"] == 3
    assert not api.is_authenticated()


async def test_run_demo_stops_on_failed_login(api, faults):
    faults.script(0.01)

    results = await run_demo(api)

    assert len(results) == 1
    assert results[0]["error"]["code"] == "rate_limit_error"
