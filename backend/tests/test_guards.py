from charades.realtime.guards import (
    RateLimiter,
    parse_int,
    validate_guess,
    validate_player_name,
    validate_room_code,
)


def test_player_name():
    assert validate_player_name("  Ann ") == "Ann"
    assert validate_player_name("") is None
    assert validate_player_name("x" * 21) is None
    assert validate_player_name("<b>") is None
    assert validate_player_name(42) is None


def test_room_code():
    assert validate_room_code(" abcde ") == "ABCDE"
    assert validate_room_code("abc") is None
    assert validate_room_code("ab-cd") is None
    assert validate_room_code(None) is None


def test_guess_length():
    assert validate_guess("  jaws ") == "jaws"
    assert validate_guess("   ") is None
    assert validate_guess("x" * 201) is None


def test_parse_int():
    assert parse_int("90") == 90
    assert parse_int(True) is None
    assert parse_int("ninety") is None
    assert parse_int(None) is None


def test_rate_limiter_window():
    limiter = RateLimiter(max_events=2, window_ms=1000)
    assert limiter.allow("a", now_ms=0)
    assert limiter.allow("a", now_ms=10)
    assert not limiter.allow("a", now_ms=20)
    assert limiter.allow("b", now_ms=20)
    assert limiter.allow("a", now_ms=1001)


def test_parse_int_rejects_non_integral_values():
    assert parse_int(90) == 90
    assert parse_int(" 60 ") == 60
    assert parse_int(90.7) is None
    assert parse_int("90.0") is None
    assert parse_int("²") is None
    assert parse_int([90]) is None
