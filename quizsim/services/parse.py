import json, re
from ..schemas import GeneratedQuestion

def _clean(s: str) -> str:
    return re.sub(r"```(json|JSON)?|```", "", s or "").strip()

def parse_question(s: str) -> GeneratedQuestion:
    """Raises ValueError (json or pydantic) when the reply does not fit the schema."""
    data = json.loads(_clean(s))
    if isinstance(data, dict) and isinstance(data.get("questions"), list) and data["questions"]:
        # some models wrap a single item in a list anyway
        data = data["questions"][0]
    return GeneratedQuestion.model_validate(data)
