import math
import random
import time
from typing import Dict, List, Optional

from loguru import logger

from ..schemas import GeneratedQuestion

DEFAULT_CATEGORY = "science"

FALLBACK_BANK: Dict[str, List[dict]] = {
    "science": [
        {"question": "What is the chemical symbol for oxygen?",
         "options": ["O", "Ox", "O2", "Oxy"], "correctAnswer": 0,
         "explanation": "O is the chemical symbol for oxygen."},
        {"question": "Which planet is closest to the Sun?",
         "options": ["Venus", "Mercury", "Earth", "Mars"], "correctAnswer": 1,
         "explanation": "Mercury is the closest planet to the Sun."},
        {"question": "What is the largest organ in the human body?",
         "options": ["Heart", "Brain", "Liver", "Skin"], "correctAnswer": 3,
         "explanation": "The skin is the largest organ in the human body."},
    ],
    "history": [
        {"question": "In what year did World War II end?",
         "options": ["1943", "1944", "1945", "1946"], "correctAnswer": 2,
         "explanation": "World War II ended in 1945."},
        {"question": "Who was the first President of the United States?",
         "options": ["Thomas Jefferson", "John Adams", "George Washington", "Benjamin Franklin"],
         "correctAnswer": 2,
         "explanation": "George Washington was the first President of the United States."},
        {"question": "What year did Columbus first reach the Americas?",
         "options": ["1490", "1491", "1492", "1493"], "correctAnswer": 2,
         "explanation": "Columbus reached the Americas in 1492."},
    ],
    "geography": [
        {"question": "What is the capital of Japan?",
         "options": ["Tokyo", "Kyoto", "Osaka", "Yokohama"], "correctAnswer": 0,
         "explanation": "Tokyo is the capital of Japan."},
        {"question": "Which is the largest country in South America?",
         "options": ["Argentina", "Brazil", "Peru", "Colombia"], "correctAnswer": 1,
         "explanation": "Brazil is the largest country in South America."},
        {"question": "What is the longest river in the world?",
         "options": ["Amazon", "Nile", "Yangtze", "Mississippi"], "correctAnswer": 1,
         "explanation": "The Nile is usually listed as the longest river in the world."},
    ],
    "math": [
        {"question": "What is 15 + 27?",
         "options": ["40", "41", "42", "43"], "correctAnswer": 2,
         "explanation": "15 + 27 = 42"},
        {"question": "What is the square root of 81?",
         "options": ["7", "8", "9", "10"], "correctAnswer": 2,
         "explanation": "The square root of 81 is 9."},
        {"question": "How many sides does a hexagon have?",
         "options": ["5", "6", "7", "8"], "correctAnswer": 1,
         "explanation": "A hexagon has 6 sides."},
    ],
}


def pick_category(topic: str) -> str:
    topic_lower = (topic or "").lower()
    for name in FALLBACK_BANK:
        if name in topic_lower:
            return name
    return DEFAULT_CATEGORY


def sine_index(seed: float, n: int) -> int:
    x = math.sin(seed) * 10000
    return min(int((x - math.floor(x)) * n), n - 1)


def fallback_question(topic: str, grade: Optional[str] = None,
                      curriculum: Optional[str] = None, now: Optional[float] = None) -> GeneratedQuestion:
    category = pick_category(topic)
    bank = FALLBACK_BANK[category]
    now_ms = (time.time() if now is None else now) * 1000
    seed = now_ms + ord((topic or " ")[0].lower()) + random.random() * 1_000_000
    idx = sine_index(seed, len(bank))
    logger.info(f"[generator] using {category} fallback #{idx + 1} for topic={topic!r}")
    return GeneratedQuestion.model_validate({**bank[idx], "gradeLevel": grade, "curriculum": curriculum})
