import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # One prompt per line; unset falls back to the built-in deck
    PROMPTS_FILE = os.environ.get('PROMPTS_FILE')
    SESSION_CODE_LENGTH = int(os.environ.get('SESSION_CODE_LENGTH', '4'))
    # Rounds played before advance emits the end event
    ROUNDS_PER_GAME = int(os.environ.get('ROUNDS_PER_GAME', '5'))
    CORS_ORIGINS = [
        o.strip() for o in os.environ.get(
            'CORS_ORIGINS',
            'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
        ).split(',') if o.strip()
    ]
