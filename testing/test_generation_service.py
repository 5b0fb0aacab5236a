"""Unit tests for GenerationService, ArtifactCache and SVG sanitization."""

import json

import httpx
import pytest

from core.generation import (
    ArtifactCache,
    GenerationClient,
    GenerationConfig,
    GenerationFailedError,
    GenerationService,
    RateLimitedError,
    SubmitOptions,
    sanitize_svg,
)


class FakeDiagramService:
    """In-memory diagram service behind httpx.MockTransport."""

    def __init__(self, files: list[dict] | None = None, submit_status: int = 200):
        self.files = files if files is not None else [{"url": "https://cdn.test/1.svg"}]
        self.submit_status = submit_status
        self.submitted: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            if self.submit_status != 200:
                return httpx.Response(self.submit_status)
            self.submitted.append(json.loads(request.content))
            return httpx.Response(200, json={"id": f"req-{len(self.submitted)}"})
        if request.url.path.endswith("/status"):
            return httpx.Response(
                200, json={"status": "completed", "generated_files": self.files}
            )
        return httpx.Response(
            200, text=f"<svg><text>diagram {len(self.submitted)}</text></svg>"
        )


def _service(fake: FakeDiagramService, **overrides) -> GenerationService:
    values = dict(
        base_url="https://diagrams.test/v1",
        api_token="test-token",
        output_format="svg",
        language=None,
        poll_initial_interval=0.001,
        poll_max_interval=0.001,
    )
    values.update(overrides)
    config = GenerationConfig(**values)
    client = GenerationClient(config, transport=httpx.MockTransport(fake))
    return GenerationService(config=config, client=client)


class TestGenerationService:
    async def test_generate_returns_sanitized_artifact(self):
        fake = FakeDiagramService()
        service = _service(fake)

        artifact = await service.generate(
            "The build runs lint, then tests, then packaging.",
            SubmitOptions(style_id="clean"),
            section_id="s1",
            segment_id="segment-2",
        )
        await service.close()

        assert artifact.content == "<svg><text>diagram 1</text></svg>"
        assert artifact.source_section_id == "s1"
        assert artifact.source_segment_id == "segment-2"
        assert artifact.cached is False
        assert fake.submitted[0]["style_id"] == "clean"

    async def test_identical_requests_hit_cache(self):
        fake = FakeDiagramService()
        service = _service(fake)
        text = "The build runs lint, then tests, then packaging."

        first = await service.generate(text, section_id="s1")
        second = await service.generate(f"  {text}\n", section_id="s2")
        await service.close()

        assert len(fake.submitted) == 1
        assert second.cached is True
        assert second.content == first.content
        assert second.fingerprint == first.fingerprint
        assert second.source_section_id == "s2"

    async def test_style_is_part_of_cache_key(self):
        fake = FakeDiagramService()
        service = _service(fake)
        text = "The build runs lint, then tests, then packaging."

        first = await service.generate(text, SubmitOptions(style_id="a"))
        second = await service.generate(text, SubmitOptions(style_id="b"))
        await service.close()

        assert len(fake.submitted) == 2
        assert first.fingerprint != second.fingerprint
        assert second.cached is False

    async def test_completed_without_files_fails(self):
        service = _service(FakeDiagramService(files=[]))

        with pytest.raises(GenerationFailedError, match="without artifacts"):
            await service.generate("Some text worth drawing")
        await service.close()
        assert len(service.cache) == 0

    async def test_errors_propagate_without_retry(self):
        fake = FakeDiagramService(submit_status=429)
        service = _service(fake)

        with pytest.raises(RateLimitedError):
            await service.generate("Some text worth drawing")
        await service.close()


class TestArtifactCache:
    def _cache(self, **overrides) -> ArtifactCache:
        values = dict(api_token="t", output_format="svg", cache_max_entries=2, cache_ttl=60)
        values.update(overrides)
        return ArtifactCache(GenerationConfig(**values))

    def test_put_and_get(self):
        cache = self._cache()
        cache.put("text", None, "<svg/>")

        assert cache.get("text") == "<svg/>"
        assert cache.get("text", "style") is None
        assert len(cache) == 1

    def test_no_style_and_empty_style_share_a_key(self):
        cache = self._cache()
        assert cache.key("text", None) == cache.key("text", "")

    def test_format_is_part_of_key(self):
        assert self._cache().key("text") != self._cache(output_format="png").key("text")

    def test_bounded_size(self):
        cache = self._cache()
        for i in range(5):
            cache.put(f"text {i}", None, f"<svg>{i}</svg>")

        assert len(cache) == 2
        assert cache.get("text 4") == "<svg>4</svg>"
        assert cache.get("text 0") is None

    def test_clear(self):
        cache = self._cache()
        cache.put("text", None, "<svg/>")
        cache.clear()
        assert len(cache) == 0


class TestSanitizeSvg:
    XLINK = 'xmlns:xlink="http://www.w3.org/1999/xlink"'

    def test_removes_script_elements(self):
        svg = '<svg><script type="text/javascript">alert(1)</script><rect/></svg>'
        assert sanitize_svg(svg) == "<svg><rect/></svg>"

    def test_removes_self_closing_script(self):
        assert sanitize_svg('<svg><script href="x.js"/><g/></svg>') == "<svg><g/></svg>"

    def test_removes_namespaced_script(self):
        svg = '<svg xmlns="http://www.w3.org/2000/svg"><script>x()</script><rect/></svg>'
        assert sanitize_svg(svg) == '<svg xmlns="http://www.w3.org/2000/svg"><rect/></svg>'

    def test_removes_foreign_object(self):
        svg = "<svg><foreignObject><div>html</div></foreignObject><circle r='1'/></svg>"
        assert sanitize_svg(svg) == '<svg><circle r="1"/></svg>'

    def test_keeps_text_after_removed_element(self):
        svg = "<svg><text>a</text><script>x()</script>tail</svg>"
        assert sanitize_svg(svg) == "<svg><text>a</text>tail</svg>"

    def test_removes_event_handlers(self):
        svg = "<svg><rect onclick='go()' width=\"10\" onMouseOver=\"x()\"/></svg>"
        assert sanitize_svg(svg) == '<svg><rect width="10"/></svg>'

    def test_angle_bracket_in_attribute_does_not_hide_handler(self):
        svg = '<svg><a title=">" onclick="alert(1)"><text>t</text></a></svg>'
        cleaned = sanitize_svg(svg)

        assert "onclick" not in cleaned
        assert "alert" not in cleaned
        assert "<text>t</text>" in cleaned

    def test_removes_javascript_links(self):
        svg = f'<svg {self.XLINK}><a xlink:href=" javascript:go()"><text>t</text></a></svg>'
        assert sanitize_svg(svg) == f"<svg {self.XLINK}><a><text>t</text></a></svg>"

    @pytest.mark.parametrize(
        "href",
        [
            "&#106;avascript:alert(1)",
            "&#x6A;avascript:alert(1)",
            "java&#9;script:alert(1)",
            "JaVaScRiPt:alert(1)",
        ],
    )
    def test_removes_encoded_javascript_links(self, href):
        svg = f'<svg><a href="{href}"><text>t</text></a></svg>'
        assert sanitize_svg(svg) == "<svg><a><text>t</text></a></svg>"

    def test_unquoted_attribute_is_rejected(self):
        with pytest.raises(GenerationFailedError):
            sanitize_svg("<svg><a href=javascript:alert(1)><text>t</text></a></svg>")

    @pytest.mark.parametrize(
        "animation",
        [
            '<animate attributeName="href" to="javascript:alert(1)"/>',
            '<set attributeName="xlink:href" to="javascript:alert(1)"/>',
            '<animate attributeName=" HREF " values="javascript:alert(1)"/>',
        ],
    )
    def test_removes_link_animations(self, animation):
        svg = f"<svg><a>{animation}<text>t</text></a></svg>"
        assert sanitize_svg(svg) == "<svg><a><text>t</text></a></svg>"

    def test_keeps_other_animations(self):
        svg = '<svg><rect><animate attributeName="opacity" from="0" to="1"/></rect></svg>'
        assert sanitize_svg(svg) == svg

    def test_keeps_ordinary_links_and_text(self):
        svg = '<svg><a href="https://example.com"><text>onload = fine</text></a></svg>'
        assert sanitize_svg(svg) == svg

    def test_drops_xml_declaration(self):
        svg = '<?xml version="1.0" encoding="UTF-8"?><svg><rect/></svg>'
        assert sanitize_svg(svg) == "<svg><rect/></svg>"

    def test_external_entities_are_not_loaded(self):
        svg = (
            '<!DOCTYPE svg [<!ENTITY leak SYSTEM "file:///etc/passwd">]>'
            "<svg><text>&leak;</text></svg>"
        )
        assert "root:" not in sanitize_svg(svg)

    @pytest.mark.parametrize("svg", ["", "<svg><rect></svg>", "not markup"])
    def test_malformed_markup_fails_generation(self, svg):
        with pytest.raises(GenerationFailedError, match="Invalid SVG"):
            sanitize_svg(svg)

    def test_script_root_fails_generation(self):
        with pytest.raises(GenerationFailedError):
            sanitize_svg("<script>alert(1)</script>")
