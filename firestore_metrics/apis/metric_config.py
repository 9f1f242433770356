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

"""The file for Firestore metric types and normalized metric records."""

import dataclasses
import enum
from typing import Any, Dict, List, Mapping, Optional


METRIC_TYPE_PREFIX = "firestore.googleapis.com"


class FirestoreMetric(enum.Enum):
  READ_COUNT = "document/read_count"
  WRITE_COUNT = "document/write_count"
  DELETE_COUNT = "document/delete_count"
  TTL_DELETION_COUNT = "document/ttl_deletion_count"
  SNAPSHOT_LISTENERS = "network/snapshot_listeners"
  ACTIVE_CONNECTIONS = "network/active_connections"
  RULES_EVALUATION_COUNT = "rules/evaluation_count"
  REQUEST_COUNT = "api/request_count"

  @property
  def metric_type(self) -> str:
    return f"{METRIC_TYPE_PREFIX}/{self.value}"


class DedupPolicy(enum.Enum):
  """How duplicate points are suppressed while normalizing.

  STRUCTURAL drops a record only when interval, labels and count are all equal
  to an earlier one. START_TIME keeps the first record seen for each
  `interval.startTime`, even if its labels differ from later ones.
  """

  STRUCTURAL = "structural"
  START_TIME = "start_time"


@dataclasses.dataclass(frozen=True)
class Interval:
  start_time: str
  end_time: str

  @classmethod
  def from_dict(cls, interval: Mapping[str, Any]) -> "Interval":
    return cls(
        start_time=interval.get("startTime", ""),
        end_time=interval.get("endTime", ""),
    )

  def to_dict(self) -> Dict[str, str]:
    return {"startTime": self.start_time, "endTime": self.end_time}


@dataclasses.dataclass
class TimeIntervalMetric:
  """A single non-zero count for one interval, with its metric labels."""

  interval: Interval
  count: int
  labels: Dict[str, str] = dataclasses.field(default_factory=dict)

  def to_dict(self) -> Dict[str, Any]:
    """Flattens labels into the record; `interval` and `count` take precedence."""
    record = dict(self.labels)
    record["interval"] = self.interval.to_dict()
    record["count"] = self.count
    return record


@dataclasses.dataclass
class MetricsResponse:
  """Normalized metrics together with the HTTP status they came back with.

  Attributes:
    status: HTTP status code of the (last) monitoring API response.
    status_text: HTTP reason phrase, e.g. "OK" or "Forbidden".
    data: Normalized metric records; empty for non-200 responses.
    body: Raw response body, only kept for non-200 responses.
  """

  status: int
  status_text: str
  data: List[TimeIntervalMetric] = dataclasses.field(default_factory=list)
  body: Optional[str] = None

  @property
  def ok(self) -> bool:
    return self.status == 200
