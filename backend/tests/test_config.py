from otp_gateway.config import Settings


def test_settings_carry_no_bind_address():
    # uvicorn owns host and port
    assert "HOST" not in Settings.model_fields
    assert "PORT" not in Settings.model_fields


def test_otp_limits_default_to_ten_minutes_and_two_attempts():
    fields = Settings.model_fields

    assert fields["OTP_TTL_SECONDS"].default == 600
    assert fields["OTP_MAX_FAILED_ATTEMPTS"].default == 2
