# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Utility class for handling the time formats of the Monitoring API."""

import datetime
from dataclasses import dataclass
import re
from typing import Tuple, Union


# RFC 3339 in UTC with a literal "Z", e.g. 2023-07-22T21:37:00Z.
_ZULU_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d{1,9})?Z$"
)

TimeLike = Union[str, datetime.datetime, "TimeUtil"]


@dataclass(frozen=True)
class TimeUtil:
  """A point in time that renders as the API's `...Z` timestamp string."""

  time: datetime.datetime

  @classmethod
  def from_iso_string(cls, time_str: str) -> "TimeUtil":
    """Builds a TimeUtil object from an ISO 8601 string ending in "Z".

    Fractional seconds past microseconds are dropped from the parsed value.
    """
    if not isinstance(time_str, str) or not _ZULU_PATTERN.match(time_str):
      raise ValueError(
          f"Invalid time {time_str!r}, expected UTC ISO 8601 such as"
          " 2023-07-22T08:00:00Z."
      )
    # fromisoformat only takes up to 6 fractional digits.
    main, _, fraction = time_str[:-1].partition(".")
    if fraction:
      main = f"{main}.{fraction[:6].ljust(6, '0')}"
    dt_object = datetime.datetime.fromisoformat(main)
    return cls(dt_object.replace(tzinfo=datetime.timezone.utc))

  @classmethod
  def from_datetime(cls, dt: datetime.datetime) -> "TimeUtil":
    """Builds a TimeUtil object from a datetime; naive values are UTC."""
    if dt.tzinfo is None:
      dt = dt.replace(tzinfo=datetime.timezone.utc)
    return cls(dt.astimezone(datetime.timezone.utc))

  @classmethod
  def from_unix_seconds(cls, unix_seconds: Union[int, float]) -> "TimeUtil":
    return cls(
        datetime.datetime.fromtimestamp(unix_seconds, tz=datetime.timezone.utc)
    )

  @classmethod
  def parse(cls, value: TimeLike) -> "TimeUtil":
    if isinstance(value, TimeUtil):
      return value
    if isinstance(value, datetime.datetime):
      return cls.from_datetime(value)
    return cls.from_iso_string(value)

  def to_datetime(self) -> datetime.datetime:
    return self.time

  def to_iso_string(self) -> str:
    if self.time.microsecond:
      return self.time.strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    return self.time.strftime("%Y-%m-%dT%H:%M:%SZ")


def time_range(start_time: TimeLike, end_time: TimeLike) -> Tuple[str, str]:
  """Validates a query range and returns it as API timestamp strings.

  Valid `...Z` strings are returned exactly as given, so fractional seconds
  beyond microseconds still reach the API. Datetimes are formatted.

  Args:
    start_time: The beginning of the time interval.
    end_time: The end of the time interval.

  Returns:
    The (start, end) pair as `YYYY-MM-DDTHH:MM:SS[.fff]Z` strings.

  Raises:
    ValueError: If either value is malformed or start is after end.
  """
  start = TimeUtil.parse(start_time)
  end = TimeUtil.parse(end_time)
  if start.time > end.time:
    raise ValueError(
        f"start_time {start.to_iso_string()} is after end_time"
        f" {end.to_iso_string()}."
    )
  return _api_string(start_time, start), _api_string(end_time, end)


def _api_string(value: TimeLike, parsed: TimeUtil) -> str:
  if isinstance(value, str):
    return value
  return parsed.to_iso_string()
