import json
import re
from typing import Any


class UtilsError(Exception):
  """Parsing related errors."""

  pass


OTP_URI_PREFIX = "otpauth://"


class CommonUtils:
  """
  Utility class for parsing configuration values and secret store output.
  """

  @staticmethod
  def parse_json(source: str, json_str: str) -> Any:
    """Parse JSON produced by an environment variable or a command."""
    try:
      return json.loads(json_str)
    except json.JSONDecodeError as e:
      raise UtilsError(f"Invalid {source} JSON: {e}") from None

  @staticmethod
  def parse_duration(duration_str: str) -> int:
    """
    Parse duration string to seconds.

    Args:
        duration_str: Duration string like "15", "30s", "1m"

    Returns:
        int: Duration in seconds

    Raises:
        UtilsError: If duration format is invalid
    """
    if not duration_str:
      raise UtilsError(f"Invalid duration format: {duration_str!r}")

    match = re.match(r"^(\d+)([smh]?)$", duration_str.strip().lower())
    if not match:
      raise UtilsError(f"Invalid duration format: {duration_str!r}")

    number, unit = match.groups()
    multipliers = {"": 1, "s": 1, "m": 60, "h": 3600}
    return int(number) * multipliers[unit]

  @staticmethod
  def strip_quotes(value: str) -> str:
    """Remove one layer of enclosing double quotes, if present."""
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
      return value[1:-1]
    return value

  @staticmethod
  def is_otp_uri(value: str) -> bool:
    """Check whether a field value is a one-time-password provisioning URI."""
    return CommonUtils.strip_quotes(value).startswith(OTP_URI_PREFIX)
