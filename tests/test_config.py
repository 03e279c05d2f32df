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

"""Tests for iobench.config module."""

import pytest

from iobench.config import BenchConfig


class TestBenchConfig:
    def test_defaults(self):
        config = BenchConfig()

        assert config.backend == "torch"
        assert config.device == "auto"
        assert config.reps == 20
        assert config.outliers == 2
        assert config.output == "text"

    def test_default_sizes(self):
        sizes = BenchConfig().sizes()

        assert sizes[0] == 16
        assert sizes[-1] == 2**27
        assert len(sizes) == 24

    def test_sizes_inclusive(self):
        assert BenchConfig(min_pow=3, max_pow=5).sizes() == [8, 16, 32]

    def test_from_yaml(self, tmp_path):
        path = tmp_path / "bench.yaml"
        path.write_text("device: cpu\nmin_pow: 10\nmax_pow: 12\nreps: 7\noutliers: 1\n")

        config = BenchConfig.from_yaml(path)

        assert config.device == "cpu"
        assert config.sizes() == [1024, 2048, 4096]
        assert config.reps == 7
        assert config.outliers == 1
        assert config.backend == "torch"

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="not found"):
            BenchConfig.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        with pytest.raises(ValueError, match="Empty config"):
            BenchConfig.from_yaml(path)

    def test_from_yaml_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")

        with pytest.raises(ValueError, match="mapping"):
            BenchConfig.from_yaml(path)

    def test_unknown_keys_rejected(self):
        with pytest.raises(ValueError, match="Unknown config keys: repz"):
            BenchConfig.from_dict({"repz": 3})

    def test_merged_ignores_none(self):
        config = BenchConfig(reps=7).merged({"reps": None, "outliers": 4})

        assert config.reps == 7
        assert config.outliers == 4

    def test_to_dict(self):
        d = BenchConfig().to_dict()

        assert d["min_pow"] == 4
        assert d["max_pow"] == 27
        assert BenchConfig.from_dict(d) == BenchConfig()

    def test_validate_accepts_defaults(self):
        BenchConfig().validate()

    @pytest.mark.parametrize(
        "overrides, match",
        [
            ({"min_pow": 5, "max_pow": 4}, "must not exceed"),
            ({"min_pow": -1}, "min_pow"),
            ({"reps": 0}, "reps"),
            ({"outliers": -1}, "outliers"),
            ({"output": "xml"}, "output"),
            ({"timer": "tsc"}, "timer"),
        ],
    )
    def test_validate_rejects(self, overrides, match):
        with pytest.raises(ValueError, match=match):
            BenchConfig(**overrides).validate()
