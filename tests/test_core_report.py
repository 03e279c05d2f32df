# Licensed to the Apache Software Foundation (ASF) under one or more
# contributor license agreements.  See the NOTICE file distributed with
# this work for additional information regarding copyright ownership.
# The ASF licenses this file to You under the Apache License, Version 2.0
# (the "License"); you may not use this file except in compliance with
# the License.  You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Tests for iobench.core.report module."""

import ast
import json
from pathlib import Path

import iobench.core
from iobench.core.report import BenchmarkReport


class TestBenchmarkReport:
    """Tests for BenchmarkReport."""

    def test_to_dict_field_set(self, make_report):
        d = make_report().to_dict()

        assert list(d) == ["backend", "device", "host_to_device", "device_to_host"]
        assert d["backend"] == "torch-2.3.0"
        assert d["device"] == "cpu"
        assert len(d["host_to_device"]["trials"]) == 2

    def test_durations_serialize_structured(self, make_report):
        d = make_report().to_dict()

        trial = d["device_to_host"]["trials"][0]
        assert trial["timing_stats"]["mean"] == {"secs": 0, "nanos": 500_000_000}
        assert trial["bandwidth"]["duration"] == {"secs": 0, "nanos": 500_000_000}

    def test_json_round_trip(self, make_report):
        report = make_report()

        assert BenchmarkReport.from_dict(json.loads(report.to_json())) == report


class TestCoreLayering:
    """The core package imports nothing outside itself but the stdlib, numpy and torch."""

    def test_core_has_no_outer_imports(self):
        core_dir = Path(iobench.core.__file__).parent

        for path in core_dir.glob("*.py"):
            tree = ast.parse(path.read_text())
            for node in ast.walk(tree):
                if isinstance(node, ast.ImportFrom):
                    assert node.level <= 1, f"{path.name} imports from a parent package"
                    assert not (node.module or "").startswith("iobench"), path.name
                elif isinstance(node, ast.Import):
                    assert not any(a.name.startswith("iobench") for a in node.names), path.name

    def test_report_storage_lives_outside_core(self):
        assert not hasattr(iobench.core, "ReportStore")
        assert not hasattr(iobench.core, "run_report")
