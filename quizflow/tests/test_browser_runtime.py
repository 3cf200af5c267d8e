"""
Smoke test for the emitted behavior script in a headless browser.

Skipped when Playwright or its Chromium build is not installed
(pip install -e ".[test]" && playwright install chromium).
"""

import json

import pytest

from quizflow.engine import compile_quiz, render_document
from quizflow.engine.plan import RuntimeTuning

async_api = pytest.importorskip("playwright.async_api")

QUIZ_URL = "http://quiz.test/"
LEAD_URL = "http://quiz.test/api/v1/leads"


@pytest.fixture
def document(buttons_graph):
    artifact = compile_quiz(
        buttons_graph,
        {"showPoints": True, "canvasId": "canvas-9", "leadCollection": {"collectEmail": True}},
        tuning=RuntimeTuning(feedback_delay=0.2),
    )
    return render_document(artifact, title="Geography")


@pytest.mark.browser
@pytest.mark.asyncio
async def test_buttons_quiz_runs_in_browser(document):
    leads = []
    page_errors = []

    async def serve(route):
        request = route.request
        if request.url == LEAD_URL:
            leads.append(request.post_data_json)
            await route.fulfill(status=201, content_type="application/json", body=json.dumps({"ok": True}))
        else:
            await route.fulfill(status=200, content_type="text/html", body=document)

    async with async_api.async_playwright() as p:
        try:
            browser = await p.chromium.launch()
        except async_api.Error as e:
            pytest.skip(f"Chromium is not available: {e}")
        page = await browser.new_page()
        page.on("pageerror", page_errors.append)
        await page.route("http://quiz.test/**", serve)
        await page.goto(QUIZ_URL)

        # Lead gate
        assert await page.evaluate("window.QuizFlow.state().phase") == "lead_gate"
        assert await page.is_hidden("#quiz-container")
        await page.fill("#lead-email", "ann@")
        await page.click(".quiz-lead-submit")
        assert await page.text_content("#quiz-lead-error") == "Please enter a valid email"
        await page.fill("#lead-email", "ann@example.com")
        await page.click(".quiz-lead-submit")
        assert await page.is_hidden("#quiz-lead-form")
        assert await page.is_visible("#scene-0")

        # First question: correct answer locks the scene
        await page.click('[data-answer-id="a1"]')
        assert await page.text_content("#current-points") == "5"
        assert await page.is_disabled('[data-answer-id="a2"]')
        assert await page.text_content("#scene-0 .quiz-scene-feedback") == "Correct!"

        # The empty scene is skipped
        await page.wait_for_selector("#scene-2:not([hidden])")
        assert await page.is_hidden("#scene-1")
        assert await page.text_content("#current-scene-number") == "2"

        async with page.expect_response(LEAD_URL):
            await page.click('[data-answer-id="b2"]')

        await page.wait_for_selector("#scene-3:not([hidden])")
        assert await page.text_content("#scene-3 [data-final-score]") == "6"
        assert (
            await page.text_content("#scene-3 [data-performance-message]")
            == "Excellent! You are a true expert!"
        )
        assert await page.evaluate("window.QuizFlow.state().phase") == "completed"

        await browser.close()

    assert len(leads) == 1
    assert leads[0]["email"] == "ann@example.com"
    assert leads[0]["points"] == 6
    assert leads[0]["canvasId"] == "canvas-9"
    assert page_errors == []
