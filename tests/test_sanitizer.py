from tastebox.app.services.recipe_import.prompts import build_extraction_prompt
from tastebox.app.services.recipe_import.sanitizer import sanitize_html


def test_strips_scripts_styles_and_comments():
    html = """
    <html><head><SCRIPT type="text/javascript">var x = 1;</SCRIPT>
    <style>body { color: red; }</style></head>
    <body><!-- tracking pixel --><h1>Tarta</h1>
    <p>Harina   y
       manzanas</p></body></html>
    """
    cleaned = sanitize_html(html)
    assert "var x" not in cleaned
    assert "color: red" not in cleaned
    assert "tracking pixel" not in cleaned
    assert "<h1>Tarta</h1>" in cleaned
    assert "Harina y manzanas" in cleaned
    assert cleaned == cleaned.strip()


def test_truncates_long_pages_with_ellipsis():
    html = "<p>" + "a" * 9000 + "</p>"
    cleaned = sanitize_html(html)
    assert len(cleaned) == 8000 + 3
    assert cleaned.endswith("...")


def test_short_pages_are_not_truncated():
    assert sanitize_html("<p>hola</p>") == "<p>hola</p>"


def test_prompt_embeds_sanitized_html_and_rules():
    prompt = build_extraction_prompt("<h1>Tarta</h1>")
    assert "<h1>Tarta</h1>" in prompt
    assert '"error": true' in prompt
    assert "prepTime" in prompt
