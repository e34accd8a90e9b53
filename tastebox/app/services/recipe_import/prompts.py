from tastebox.app.db.models import Difficulty

EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert at extracting structured recipe data from web content. "
    "Always respond with valid JSON only."
)

_DIFFICULTY_CHOICES = ", ".join(f'"{level.value}"' for level in Difficulty)

EXTRACTION_SCHEMA = """{
  "title": "Recipe name",
  "description": "Brief description",
  "images": [
    {
      "url": "full image URL",
      "altText": "image description",
      "order": 1
    }
  ],
  "ingredients": [
    {
      "name": "ingredient name",
      "amount": "quantity",
      "unit": "unit of measure"
    }
  ],
  "instructions": [
    {
      "step": 1,
      "description": "instruction text"
    }
  ],
  "prepTime": 30,
  "cookTime": 45,
  "servings": 4,
  "difficulty": "Medio",
  "recipeType": "Main course",
  "tags": ["tag1", "tag2"]
}"""

EXTRACTION_TEMPLATE = """Extract recipe information from this {source} content and return it as valid JSON only. No explanation, just the JSON object.

{source} Content:
{content}

Extract and return a JSON object with this exact structure:
{schema}

Important requirements:
- Return ONLY valid JSON, no markdown formatting
- Extract maximum 3 images with full URLs (absolute, starting with http or https)
- Include all ingredients with amounts
- Number instructions sequentially starting from 1
- Use {difficulties} for difficulty
- prepTime, cookTime and servings are numbers (minutes for times)
- If a field is not found, use null (never omit the key)
- Ensure all URLs are complete and valid
- If the content does not contain a recipe, return exactly {{"error": true}}"""


def build_extraction_prompt(sanitized_html: str) -> str:
    return _render("HTML", sanitized_html)


def build_document_prompt(document_text: str) -> str:
    """Prompt for text pulled out of an uploaded PDF or Word document."""
    return _render("Document", document_text)


def _render(source: str, content: str) -> str:
    return EXTRACTION_TEMPLATE.format(
        source=source,
        content=content,
        schema=EXTRACTION_SCHEMA,
        difficulties=_DIFFICULTY_CHOICES,
    )
