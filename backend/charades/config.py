import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Server limits
    MAX_ROOMS = int(os.environ.get("MAX_ROOMS", "500"))
    ROOM_CODE_LENGTH = int(os.environ.get("ROOM_CODE_LENGTH", "5"))
    RATE_LIMIT_WINDOW_MS = int(os.environ.get("RATE_LIMIT_WINDOW_MS", "1000"))
    RATE_LIMIT_MAX = int(os.environ.get("RATE_LIMIT_MAX", "10"))
    MAX_GUESS_LENGTH = int(os.environ.get("MAX_GUESS_LENGTH", "200"))

    # Phrase dataset (JSON list, or {"Movies": [...]}); built-in list when empty
    PHRASES_FILE = os.environ.get("PHRASES_FILE", "")

    # Game
    MAX_PLAYERS = int(os.environ.get("MAX_PLAYERS", "12"))
    MAX_CLUES = int(os.environ.get("MAX_CLUES", "12"))
    # A turn closes once this many guessers are correct, even with guessers left.
    MAX_CORRECT_BEFORE_END = int(os.environ.get("MAX_CORRECT_BEFORE_END", "3"))
    TURN_END_DELAY_SEC = float(os.environ.get("TURN_END_DELAY_SEC", "5"))
    DEFAULT_TURN_DURATION_SEC = int(os.environ.get("DEFAULT_TURN_DURATION_SEC", "90"))
    DEFAULT_ROUNDS_PER_PLAYER = int(os.environ.get("DEFAULT_ROUNDS_PER_PLAYER", "1"))
    ALLOWED_TURN_DURATIONS = (60, 90, 120)
    ALLOWED_ROUNDS_PER_PLAYER = (1, 2, 3)
