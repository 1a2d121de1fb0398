"""Tests for ddconfgen.pipeline module."""

from __future__ import annotations

import pytest

from ddconfgen.errors import (
    ConfigValidationError,
    DiscoveryError,
    NotFoundError,
    TemplateExecutionError,
)
from ddconfgen.genconfig import parse_gen_config
from ddconfgen.pipeline import discover_all, render_outputs, run_generation
from ddconfgen.resources.base import Provider, Resource
from ddconfgen.resources.registry import ProviderRegistry

TEMPLATE = (
    "init_config:\n"
    "\n"
    "instances:\n"
    "{%- for resource in resources %}\n"
    "  - host: {{ resource.host }}\n"
    "    port: {{ resource.port }}\n"
    "    username: {{ static.username }}\n"
    "{%- endfor %}\n"
)


class RecordingProvider(Provider):
    """Provider returning canned resources and recording its calls."""

    def __init__(self, resources=None, error=None):
        self.resources = resources or []
        self.error = error
        self.calls = []

    @property
    def type(self) -> str:
        return "fake_redis"

    def discover(self, config):
        self.calls.append(config)
        if self.error is not None:
            raise self.error
        self.validate_config(config)
        return list(self.resources)


def make_registry(provider):
    registry = ProviderRegistry()
    registry.register(provider)
    return registry


def make_gen_config(output_file, template="redis.yaml.j2", resources=None):
    return parse_gen_config(
        {
            "version": "1.0",
            "resources": resources
            or [{"name": "cache", "type": "fake_redis", "region": "us-east-1", "tags": {"service": "cache"}}],
            "outputs": [
                {
                    "template": template,
                    "output_file": str(output_file),
                    "data": {"resource_name": "cache", "static": {"username": "admin"}},
                }
            ],
        }
    )


class TestDiscoverAll:
    """Tests for discover_all."""

    def test_discovers_each_definition(self, tmp_path):
        provider = RecordingProvider([Resource(host="redis1", port=6379)])
        gen_config = make_gen_config(tmp_path / "out.yaml")

        discovered = discover_all(gen_config, make_registry(provider))

        assert discovered == {"cache": [Resource(host="redis1", port=6379)]}
        assert provider.calls[0].region == "us-east-1"
        assert provider.calls[0].static_tags == {"service": "cache"}

    def test_unknown_type(self, tmp_path):
        gen_config = make_gen_config(
            tmp_path / "out.yaml",
            resources=[{"name": "cache", "type": "unknown", "region": "us-east-1"}],
        )

        with pytest.raises(NotFoundError, match="unknown"):
            discover_all(gen_config, make_registry(RecordingProvider()))

    def test_discovery_error_names_resource(self, tmp_path):
        provider = RecordingProvider(error=DiscoveryError("failed to get resources by tags: denied"))
        gen_config = make_gen_config(tmp_path / "out.yaml")

        with pytest.raises(DiscoveryError, match="failed to discover resources for 'cache'"):
            discover_all(gen_config, make_registry(provider))

    def test_config_error_names_resource(self, tmp_path):
        provider = RecordingProvider(error=ConfigValidationError("filters.tags must be a map, got str"))
        gen_config = make_gen_config(tmp_path / "out.yaml")

        with pytest.raises(ConfigValidationError, match="invalid configuration for resource 'cache'"):
            discover_all(gen_config, make_registry(provider))


class TestRenderOutputs:
    """Tests for render_outputs."""

    def test_relative_template_resolved_from_config_dir(self, tmp_path, write_file):
        write_file("conf/redis.yaml.j2", TEMPLATE)
        config_path = write_file("conf/gen.yaml", "")
        output_file = tmp_path / "out" / "nested" / "redisdb.yaml"
        gen_config = make_gen_config(output_file)

        written = render_outputs(
            gen_config,
            config_path,
            {"cache": [Resource(host="redis1", port=6379)]},
        )

        assert written == [output_file]
        assert output_file.read_text() == (
            "init_config:\n"
            "\n"
            "instances:\n"
            "  - host: redis1\n"
            "    port: 6379\n"
            "    username: admin\n"
        )

    def test_absolute_template_path(self, tmp_path, write_file):
        template = write_file("templates/redis.yaml.j2", TEMPLATE)
        output_file = tmp_path / "redisdb.yaml"
        gen_config = make_gen_config(output_file, template=str(template))

        render_outputs(gen_config, tmp_path / "elsewhere" / "gen.yaml", {"cache": []})

        assert output_file.read_text() == "init_config:\n\ninstances:\n"

    def test_undiscovered_resource(self, tmp_path):
        gen_config = make_gen_config(tmp_path / "out.yaml")

        with pytest.raises(NotFoundError, match="cache"):
            render_outputs(gen_config, tmp_path / "gen.yaml", {})

    def test_template_error_writes_nothing(self, tmp_path, write_file):
        write_file("redis.yaml.j2", "{{ missing.value }}")
        output_file = tmp_path / "out.yaml"
        gen_config = make_gen_config(output_file)

        with pytest.raises(TemplateExecutionError):
            render_outputs(gen_config, tmp_path / "gen.yaml", {"cache": []})

        assert not output_file.exists()


class TestRunGeneration:
    """Tests for run_generation."""

    def test_end_to_end(self, tmp_path, write_file):
        write_file("redis.yaml.j2", TEMPLATE)
        output_file = tmp_path / "conf.d" / "redisdb.yaml"
        config_path = write_file(
            "gen.yaml",
            "version: \"1.0\"\n"
            "resources:\n"
            "  - name: cache\n"
            "    type: fake_redis\n"
            "    region: us-east-1\n"
            "outputs:\n"
            "  - template: redis.yaml.j2\n"
            f"    output_file: {output_file}\n"
            "    data:\n"
            "      resource_name: cache\n"
            "      static:\n"
            "        username: admin\n",
        )
        provider = RecordingProvider(
            [Resource(host="redis1", port=6379), Resource(host="redis2", port=6380)]
        )

        written = run_generation(config_path, make_registry(provider))

        assert written == [output_file]
        content = output_file.read_text()
        assert "  - host: redis1\n    port: 6379\n" in content
        assert "  - host: redis2\n    port: 6380\n" in content
        assert content.index("redis1") < content.index("redis2")

    def test_invalid_config_stops_before_discovery(self, write_file):
        config_path = write_file("gen.yaml", "version: \"1.0\"\nresources: []\noutputs: []\n")
        provider = RecordingProvider()

        with pytest.raises(ConfigValidationError, match="at least one resource"):
            run_generation(config_path, make_registry(provider))

        assert provider.calls == []
