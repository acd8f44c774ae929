import logging
import random
import threading
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)

DEFAULT_PROMPTS = [
    'The worst thing to hear from your pilot',
    'A rejected name for a breakfast cereal',
    'The real reason dinosaurs went extinct',
    'Something you should never say at a job interview',
    'The secret ingredient in grandma\'s soup',
    'A terrible slogan for a dentist',
    'What the cat is actually thinking',
    'The least popular theme park ride',
]


def load_prompts(path: str) -> List[str]:
    """Read one prompt per line, skipping blank lines."""
    with open(path, encoding='utf-8') as fh:
        prompts = [line.strip() for line in fh if line.strip()]
    logger.info(f"[prompts-loaded] path={path} count={len(prompts)}")
    return prompts


class PromptDeck:
    """Shuffled prompt supplier; reshuffles once every prompt has been dealt."""

    def __init__(self, prompts: Iterable[str], rng: Optional[random.Random] = None):
        self.prompts = list(prompts)
        if not self.prompts:
            raise ValueError('prompt corpus is empty')
        self._rng = rng or random.Random()
        self._pending: List[str] = []
        self._lock = threading.Lock()

    def next_prompt_text(self) -> str:
        with self._lock:
            if not self._pending:
                self._pending = list(self.prompts)
                self._rng.shuffle(self._pending)
            return self._pending.pop()

    def __len__(self):
        return len(self.prompts)


def prompt_source_from_config(config) -> PromptDeck:
    path = config.get('PROMPTS_FILE')
    if path:
        return PromptDeck(load_prompts(path))
    return PromptDeck(DEFAULT_PROMPTS)
