"""Integration tests for the complete dictation workflow."""

import asyncio

import pytest
from aiohttp import web
from aiohttp import test_utils

from smartdictation.capture.engine import SpeechCaptureEngine
from smartdictation.models.sections import ExistingSection, MergeMode, SectionUpdate
from smartdictation.parsing.client import TranscriptParserClient
from smartdictation.services.session_controller import DictationSessionController


def serve_parser(response, received):
    async def handler(request):
        received.append(await request.json())
        return web.json_response(response)

    app = web.Application()
    app.router.add_post("/api/hp/parse-dictation", handler)
    return test_utils.TestServer(app)


@pytest.mark.integration
class TestDictationWorkflow:
    """Integration tests from speech capture to note updates."""

    def test_record_parse_and_apply(self, provider, chest_pain_response):
        """Dictate across a service restart, parse over HTTP and merge into an existing note."""
        received = []

        async def scenario():
            server = serve_parser(chest_pain_response, received)
            await server.start_server()
            try:
                # Initialize components
                engine = SpeechCaptureEngine(provider, continuous=True, process_commands=True)
                controller = DictationSessionController(
                    engine=engine,
                    parser_client=TranscriptParserClient(base_url=str(server.make_url("/api"))),
                )

                # Dictate; the provider drops the session halfway through
                controller.start_recording()
                provider.open()
                provider.final("Chief complaint is chest pain period")
                provider.end()
                provider.open()
                provider.final("Physical exam shows normal heart sounds period stop dictation")
                provider.end()

                assert provider.start_calls == 2
                assert controller.is_recording is False

                # Parse and review
                assert await controller.parse_transcript() is True
                controller.toggle_section_selection("physical_exam")
                controller.toggle_section_selection("physical_exam")

                existing = [ExistingSection(id="chief_complaint", content="Follow-up visit.")]
                return controller.apply(existing, MergeMode.APPEND)
            finally:
                await server.close()

        updates = asyncio.run(scenario())

        assert received == [{
            "transcript": "Chief complaint is chest pain. Physical exam shows normal heart sounds."
        }]
        assert updates == [
            SectionUpdate(id="chief_complaint", content="Follow-up visit.\n\nChief complaint is chest pain."),
            SectionUpdate(id="physical_exam", content="Physical exam shows normal heart sounds."),
        ]
