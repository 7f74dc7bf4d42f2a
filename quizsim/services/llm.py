import asyncio, json, random
from openai import OpenAI
from ..settings import settings

client = OpenAI(
    base_url=settings.LLM_BASE_URL,
    api_key=settings.LLM_API_KEY,
    timeout=settings.LLM_TIMEOUT,
    max_retries=0,
) if not settings.MOCK_MODE else None

def _mock_reply(messages) -> str:
    n = random.randint(2, 99)
    return "```json\n" + json.dumps({
        "question": f"[mock] What is {n} + {n}?",
        "options": [str(2 * n - 1), str(2 * n), str(2 * n + 1), str(n)],
        "correctAnswer": 1,
        "explanation": f"{n} + {n} = {2 * n}",
    }) + "\n```"

def _llm_sync(messages, *, max_tokens=500, temperature=0.7):
    if settings.MOCK_MODE:
        return _mock_reply(messages)
    resp = client.chat.completions.create(
        model=settings.LLM_MODEL,
        messages=messages,
        max_tokens=max_tokens,
        temperature=temperature,
    )
    return resp.choices[0].message.content

async def llm(messages, **kw):
    return await asyncio.to_thread(_llm_sync, messages, **kw)
