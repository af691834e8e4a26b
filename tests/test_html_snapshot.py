from a11y_auditor.checks import ContrastCheck
from a11y_auditor.config import CheckOptions
from a11y_auditor.snapshot.html import parse_inline_style, snapshot_from_html

from builders import PAGE_URL


def first(snapshot, tag):
    return snapshot.find_all(tag)[0]


class TestParseInlineStyle:

    def test_declarations(self):
        style = parse_inline_style("Color: #333 !important; font-size:20px;; bogus; background:")
        assert style == {'color': '#333', 'font-size': '20px'}

    def test_empty(self):
        assert parse_inline_style(None) == {}


class TestSnapshotFromHtml:

    def test_document_structure(self):
        snapshot = snapshot_from_html(
            "<html><head><title>T</title><script>var x;</script></head>"
            "<body><main><p>Hi <b>there</b></p></main><script>var y;</script></body></html>",
            PAGE_URL,
        )
        assert [n.tag for n in snapshot] == ['html', 'body', 'main', 'p', 'b']
        p = first(snapshot, 'p')
        assert p.text == 'Hi there'
        assert p.direct_text == 'Hi'
        assert snapshot.parent(p).tag == 'main'
        assert snapshot.url == PAGE_URL

    def test_interactive_and_focusable_flags(self):
        snapshot = snapshot_from_html(
            '<body><a href="/x">Link</a><a name="anchor">Anchor</a>'
            '<button disabled>Off</button><div tabindex="0">Widget</div>'
            '<input type="hidden" name="t"></body>',
            PAGE_URL,
        )
        flags = {
            (n.tag, n.text or n.attr('type')): (n.interactive, n.focusable)
            for n in snapshot if n.tag not in ('html', 'body')
        }
        assert flags[('a', 'Link')] == (True, True)
        assert flags[('a', 'Anchor')] == (True, False)
        assert flags[('button', 'Off')] == (True, False)
        assert flags[('div', 'Widget')] == (False, True)
        assert flags[('input', 'hidden')] == (True, False)

    def test_inherited_and_default_styles(self):
        snapshot = snapshot_from_html(
            '<body><div style="color: #333; font-size: 20px; background-color: #eee">'
            '<p>Body</p><h1>Title</h1><a href="/">Link</a></div></body>',
            PAGE_URL,
        )
        p = first(snapshot, 'p')
        assert p.css('color') == '#333'
        assert p.css('font-size') == '20px'
        assert p.css('background-color') == 'rgba(0, 0, 0, 0)'
        assert first(snapshot, 'h1').css('font-size') == '32px'
        assert first(snapshot, 'h1').css('font-weight') == '700'
        assert first(snapshot, 'a').css('color') == 'rgb(0, 0, 238)'

    def test_background_shorthand(self):
        snapshot = snapshot_from_html(
            '<body><section style="background: url(hero.jpg) center / cover"></section>'
            '<div style="background: #000"></div></body>',
            PAGE_URL,
        )
        assert first(snapshot, 'section').css('background-image').startswith('url(')
        assert first(snapshot, 'div').css('background-color') == '#000'

    def test_hidden_elements(self):
        snapshot = snapshot_from_html(
            '<body><p hidden>Secret</p><div style="display:none"><p>Nested</p></div>'
            '<p>Shown</p></body>',
            PAGE_URL,
        )
        visible = [n.text for n in snapshot.find_all('p') if snapshot.is_visible(n)]
        assert visible == ['Shown']

    def test_body_background_is_the_canvas(self):
        snapshot = snapshot_from_html(
            '<body style="background-color: rgb(0, 0, 0)"><p>Text</p></body>', PAGE_URL
        )
        assert snapshot.canvas_color == 'rgb(0, 0, 0)'

    def test_no_geometry_or_focus_styles(self):
        snapshot = snapshot_from_html('<body><button>Go</button></body>', PAGE_URL)
        button = first(snapshot, 'button')
        assert button.box is None
        assert button.focus_style is None

    def test_static_contrast_failure(self):
        snapshot = snapshot_from_html(
            '<body><p style="color: #999999">Light grey</p></body>', PAGE_URL
        )
        result = ContrastCheck().run(snapshot, CheckOptions())
        assert [f.type for f in result.findings] == ['contrast_failure']
