import random
import string
import uuid

SESSION_CODE_ALPHABET = string.ascii_lowercase + string.digits


def new_session_code(length=4):
    """Generate a short, shareable session code. Callers handle collisions."""
    return ''.join(random.choices(SESSION_CODE_ALPHABET, k=length))


def new_round_id():
    return str(uuid.uuid4())
