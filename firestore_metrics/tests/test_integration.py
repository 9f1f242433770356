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

# This test talks to the real Cloud Monitoring API. Run it from the project
# root with a service account key that can read monitoring data:
# FIRESTORE_METRICS_SA_PATH=/path/to/sa.json python -m unittest firestore_metrics.tests.test_integration

import os
import unittest

from absl import logging

from firestore_metrics.apis.client import FirestoreMetrics

SA_PATH = os.environ.get("FIRESTORE_METRICS_SA_PATH")
START = "2023-07-22T08:00:00Z"
END = "2023-07-22T22:42:15Z"


@unittest.skipUnless(
    SA_PATH and os.path.exists(SA_PATH),
    "Set FIRESTORE_METRICS_SA_PATH to a valid service account key file.",
)
class TestFirestoreMetricsLive(unittest.TestCase):

  @classmethod
  def setUpClass(cls):
    cls.metrics = FirestoreMetrics(key_filename=SA_PATH)
    cls.metrics.generate_token()

  def _assert_ok(self, result):
    # The API responds with 403 when billing is not enabled on the project.
    if result.status == 403:
      logging.warning(f"{result.status} {result.status_text}: {result.body}")
    self.assertEqual(result.status, 200)

  def test_read_count(self):
    self._assert_ok(self.metrics.get_read_count(START, END, with_status=True))

  def test_write_count(self):
    self._assert_ok(self.metrics.get_write_count(START, END, with_status=True))

  def test_delete_count(self):
    self._assert_ok(self.metrics.get_delete_count(START, END, with_status=True))

  def test_active_connections(self):
    self._assert_ok(
        self.metrics.get_active_connections(START, END, with_status=True)
    )

  def test_snapshot_listeners(self):
    self._assert_ok(
        self.metrics.get_snapshot_listeners(START, END, with_status=True)
    )

  def test_ttl_deletion_count(self):
    self._assert_ok(
        self.metrics.get_ttl_deletion_count(START, END, with_status=True)
    )

  def test_rules_evaluation_count(self):
    self._assert_ok(
        self.metrics.get_rules_evaluation_count(START, END, with_status=True)
    )

  def test_request_count(self):
    self._assert_ok(self.metrics.get_request_count(START, END, with_status=True))


if __name__ == "__main__":
  unittest.main()
