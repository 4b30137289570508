from task_organizer.models import CategoryName, Priority

SYSTEM_PREAMBLE = (
    "You are a helpful assistant that turns raw task notes into structured JSON. "
    "Always answer with valid JSON only."
)

# The mock provider looks for the notes between these fences.
NOTES_FENCE = '"""'

_PRIORITIES = "|".join(p.value for p in Priority)
_CATEGORIES = "|".join(c.value for c in CategoryName)


def build_extraction_prompt(raw_notes: str) -> str:
    """Instruction prompt for turning free-form notes into a JSON task list."""
    return f"""You are a task organization assistant. Break the raw notes below into a structured list of tasks.

For every task decide:
1. Title: a short, action-oriented description
2. Priority: High (urgent or important), Medium (moderately important) or Low (can wait)
3. Category: Work (professional work), Admin (administration, paperwork), Meetings (calls and meetings), Personal (personal errands) or Other

Raw notes:
{NOTES_FENCE}
{raw_notes}
{NOTES_FENCE}

Answer ONLY with a JSON array in exactly this format:
[
  {{
    "title": "task description",
    "priority": "{_PRIORITIES}",
    "category": "{_CATEGORIES}"
  }}
]

Rules:
- Split compound tasks into separate items
- Start every title with an action verb (e.g. "Finish", "Check", "Call", "Review")
- Be concise but clear
- Output ONLY the JSON array, no other text"""
