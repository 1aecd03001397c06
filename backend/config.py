import os

_DEFAULT_ORIGINS = ','.join([
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
])

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    CORS_ALLOWED_ORIGINS = [o.strip() for o in os.environ.get('CORS_ALLOWED_ORIGINS', _DEFAULT_ORIGINS).split(',') if o.strip()]
    # New-room defaults
    DEFAULT_ROUNDS = int(os.environ.get('DEFAULT_ROUNDS', '3'))
    DEFAULT_DRAW_TIME_SEC = int(os.environ.get('DEFAULT_DRAW_TIME_SEC', '60'))
    # Room tokens: URL-safe, 64-symbol alphabet
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '7'))
    # Drawing countdown (seconds between ticks)
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    # Set to 0 to run without the drawing countdown
    ROUND_TIMER_ENABLED = os.environ.get('ROUND_TIMER_ENABLED', '1') not in ('0', 'false', 'False')
