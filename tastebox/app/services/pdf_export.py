"""Recipe to PDF rendering with WeasyPrint.

The recipe is laid out as a small HTML document and WeasyPrint turns it into a
PDF. WeasyPrint needs Pango at runtime, so it is imported on first use and a
missing installation surfaces as ``ExportError`` instead of breaking app start.
"""

import logging
import re
import unicodedata
from html import escape
from pathlib import Path
from typing import Optional

from tastebox.app.core.config import get_settings
from tastebox.app.core.errors import ExportError
from tastebox.app.schemas.recipe import RecipeRead

logger = logging.getLogger(__name__)

_BASE_CSS = """
@page {
    size: A4;
    margin: 2cm;
}

body {
    font-family: 'Helvetica Neue', Arial, sans-serif;
    font-size: 11pt;
    line-height: 1.5;
    color: #1a1a1a;
}

h1 { font-size: 22pt; margin: 0 0 0.3em; color: #111; border-bottom: 1px solid #ddd; padding-bottom: 0.2em; }
h2 { font-size: 14pt; margin: 1.2em 0 0.4em; color: #222; page-break-after: avoid; }

.description { color: #444; font-style: italic; }
.meta { margin: 0.8em 0; font-size: 10pt; color: #333; }
.meta span { margin-right: 1.5em; }
.tags { font-size: 9pt; color: #666; }

img.hero {
    max-width: 100%;
    max-height: 9cm;
    display: block;
    margin: 0.8em auto;
    page-break-inside: avoid;
}

ul, ol { margin: 0.4em 0; padding-left: 1.5em; }
li { margin: 0.25em 0; }
.settings { font-size: 9pt; color: #666; }

table.nutrition { border-collapse: collapse; font-size: 10pt; margin-top: 0.4em; }
table.nutrition td { border: 1px solid #ccc; padding: 3px 10px; }

.source { margin-top: 2em; font-size: 8pt; color: #888; }
"""

_FILENAME_UNSAFE_RE = re.compile(r"[^A-Za-z0-9_\- ]+")
_NUTRIENT_LABELS = [
    ("calories", "Calorías", "kcal"),
    ("protein", "Proteínas", "g"),
    ("carbohydrates", "Carbohidratos", "g"),
    ("fat", "Grasas", "g"),
    ("fiber", "Fibra", "g"),
    ("sugar", "Azúcares", "g"),
    ("sodium", "Sodio", "mg"),
]


def pdf_filename(title: str) -> str:
    # Header values must stay ASCII; accents are folded (Ñoquis -> Noquis)
    ascii_title = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    name = _FILENAME_UNSAFE_RE.sub("", ascii_title).strip().replace(" ", "_")
    return f"{name or 'receta'}.pdf"


def _image_src(url: str) -> str:
    """Local media paths become file URIs; anything else is left for WeasyPrint to fetch."""
    settings = get_settings()
    prefix = settings.media_url_prefix.rstrip("/") + "/"
    if url.startswith(prefix):
        return (Path(settings.media_root) / Path(url[len(prefix) :]).name).resolve().as_uri()
    return url


def _instruction_settings(time: Optional[str], temperature: Optional[str], speed: Optional[str]) -> str:
    parts = [value.strip() for value in (time, temperature, speed) if value and value.strip()]
    if not parts:
        return ""
    return f' <span class="settings">({escape(" / ".join(parts))})</span>'


def build_recipe_html(recipe: RecipeRead) -> str:
    parts = [f"<h1>{escape(recipe.title)}</h1>"]
    if recipe.description:
        parts.append(f'<p class="description">{escape(recipe.description)}</p>')
    if recipe.images:
        parts.append(f'<img class="hero" src="{escape(_image_src(recipe.images[0].url))}" alt="">')

    meta = [
        f"<span>Preparación: {recipe.prep_time_minutes} min</span>",
        f"<span>Porciones: {recipe.servings}</span>",
        f"<span>Dificultad: {escape(recipe.difficulty.value)}</span>",
    ]
    if recipe.cook_time_minutes is not None:
        meta.insert(1, f"<span>Cocción: {recipe.cook_time_minutes} min</span>")
    if recipe.recipe_type:
        meta.append(f"<span>Tipo: {escape(recipe.recipe_type)}</span>")
    parts.append(f'<div class="meta">{"".join(meta)}</div>')
    if recipe.tags:
        parts.append(f'<div class="tags">{escape(", ".join(recipe.tags))}</div>')

    if recipe.ingredients:
        items = []
        for ing in recipe.ingredients:
            quantity = " ".join(value for value in (ing.amount, ing.unit) if value)
            items.append(f"<li>{escape(quantity)} {escape(ing.name)}</li>")
        parts.append(f"<h2>Ingredientes</h2><ul>{''.join(items)}</ul>")

    if recipe.instructions:
        steps = [
            f"<li>{escape(inst.description)}{_instruction_settings(inst.time, inst.temperature, inst.speed)}</li>"
            for inst in recipe.instructions
        ]
        parts.append(f"<h2>Preparación</h2><ol>{''.join(steps)}</ol>")

    if recipe.nutrition:
        rows = [
            f"<tr><td>{label}</td><td>{getattr(recipe.nutrition, field):g} {unit}</td></tr>"
            for field, label, unit in _NUTRIENT_LABELS
        ]
        parts.append(f'<h2>Información nutricional (por porción)</h2><table class="nutrition">{"".join(rows)}</table>')

    if recipe.source_url:
        parts.append(f'<p class="source">Fuente: {escape(recipe.source_url)}</p>')

    body = "\n".join(parts)
    return f"""<!DOCTYPE html>
<html lang="es">
<head>
<meta charset="utf-8">
<title>{escape(recipe.title)}</title>
</head>
<body>
{body}
</body>
</html>"""


def render_pdf(html_content: str) -> bytes:
    try:
        from weasyprint import CSS, HTML
    except (ImportError, OSError) as exc:
        logger.error("WeasyPrint is not available: %s", exc)
        raise ExportError("PDF export is not available on this server") from exc

    try:
        return HTML(string=html_content).write_pdf(stylesheets=[CSS(string=_BASE_CSS)])
    except Exception as exc:
        logger.exception("WeasyPrint failed to render a recipe")
        raise ExportError("Failed to generate PDF") from exc


def export_recipe_pdf(recipe: RecipeRead) -> bytes:
    return render_pdf(build_recipe_html(recipe))
