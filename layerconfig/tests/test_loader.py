"""
Tests for the Configuration Loader

End-to-end loads combining file, environment and validation.
"""

import logging
from typing import Annotated, Optional

import pytest
from pydantic import BaseModel, Field

from layerconfig import (
    ConfigFileError,
    ConfigValidationError,
    DecodeError,
    Env,
    EnvOverlayError,
    Hostname,
    Json,
    LoadOptions,
    OneOf,
    Required,
    AlphaNum,
    Yaml,
    read,
    read_with_options,
    with_env_prefix,
    with_file,
)


class EnvConfig(BaseModel):
    port: Annotated[int, Env("PORT")] = 0
    username: Annotated[str, Env("USERNAME")] = ""


class JsonConfig(BaseModel):
    port: Annotated[int, Json("port")] = 0
    username: Annotated[str, Json("username")] = ""


class YamlConfig(BaseModel):
    port: Annotated[int, Yaml("port")] = 0
    username: Annotated[str, Yaml("username")] = ""


class TestReadFromEnvironment:
    """Loads without a file."""

    def test_read_from_env(self, clean_env, workdir):
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("USERNAME", "sustainyfacts")

        conf = EnvConfig()
        result = read(conf)

        assert result is conf
        assert conf == EnvConfig(port=8080, username="sustainyfacts")

    def test_validation_failure(self, clean_env, workdir):
        class Validated(BaseModel):
            port: Annotated[int, Env("PORT"), Field(gt=0)] = 0
            username: Annotated[str, Env("USERNAME"), Required, AlphaNum] = ""

        clean_env.setenv("PORT", "-1")
        clean_env.setenv("USERNAME", "sustainyfacts")

        with pytest.raises(ConfigValidationError) as exc_info:
            read(Validated())
        assert exc_info.value.fields == ["port"]

    def test_malformed_env_value(self, clean_env, workdir):
        clean_env.setenv("PORT", "eighty")
        with pytest.raises(EnvOverlayError):
            read(EnvConfig())

    def test_aliased_field_is_validated(self, clean_env, workdir):
        class Aliased(BaseModel):
            port: Annotated[int, Env("PORT")] = Field(1, gt=0, validation_alias="port_number")

        clean_env.setenv("PORT", "-1")

        with pytest.raises(ConfigValidationError) as exc_info:
            read(Aliased())
        assert exc_info.value.fields == ["port"]

    def test_absent_optional_record_stays_absent(self, clean_env, workdir):
        class Db(BaseModel):
            host: Annotated[str, Env("HOST"), Required]

        class WithOptionalDb(BaseModel):
            username: Annotated[str, Env("USERNAME")] = ""
            db: Annotated[Optional[Db], Env(prefix="DB_")] = None

        clean_env.setenv("USERNAME", "admin")

        conf = read(WithOptionalDb())
        assert conf.db is None

    def test_optional_record_created_and_validated(self, clean_env, workdir):
        class Db(BaseModel):
            host: Annotated[str, Env("HOST"), Hostname]
            port: Annotated[int, Env("PORT"), Field(gt=0)] = 5432

        class WithOptionalDb(BaseModel):
            db: Annotated[Optional[Db], Env(prefix="DB_")] = None

        clean_env.setenv("DB_PORT", "6543")

        with pytest.raises(ConfigValidationError) as exc_info:
            read(WithOptionalDb())
        assert exc_info.value.fields == ["db.host"]


class TestReadFromFile:
    """Loads from JSON and YAML files."""

    def test_json_file(self, workdir, write_file):
        write_file(workdir / "myconfig.json", '{"port":8080,"username":"sustainyfacts"}')

        conf = JsonConfig()
        read(conf, with_file("myconfig.json"))

        assert conf == JsonConfig(port=8080, username="sustainyfacts")

    def test_json_file_in_home(self, workdir, home, write_file):
        write_file(home / ".mysecretconfig.json", '{"port":8080,"username":"sustainyfacts"}')

        conf = JsonConfig()
        read(conf, with_file(".mysecretconfig.json"))

        assert conf == JsonConfig(port=8080, username="sustainyfacts")

    def test_invalid_json_file(self, workdir, write_file):
        write_file(workdir / "myconfig.json", '{"port":8080,"username":sustainyfacts"}')

        conf = JsonConfig()
        with pytest.raises(DecodeError):
            read(conf, with_file("myconfig.json"))
        assert conf == JsonConfig()

    def test_yaml_file(self, workdir, write_file):
        write_file(workdir / "myconfig.yaml", (
            "# Example YAML configuration\n"
            "port: 8080 # Comment\n"
            "username: sustainyfacts\n"
        ))

        conf = YamlConfig()
        read(conf, with_file("myconfig.yaml"))

        assert conf == YamlConfig(port=8080, username="sustainyfacts")

    def test_missing_file(self, workdir):
        with pytest.raises(ConfigFileError) as exc_info:
            read(JsonConfig(), with_file("missing.json"))
        assert exc_info.value.not_found

    def test_missing_file_skips_environment(self, clean_env, workdir):
        class Both(BaseModel):
            port: Annotated[int, Json("port"), Env("PORT")] = 0

        clean_env.setenv("PORT", "8080")
        conf = Both()
        with pytest.raises(ConfigFileError):
            read(conf, with_file("missing.json"))
        assert conf.port == 0

    def test_unrecognised_suffix_is_ignored(self, clean_env, workdir, write_file):
        write_file(workdir / "notes.txt", "not configuration")
        clean_env.setenv("PORT", "8080")

        conf = EnvConfig()
        read(conf, with_file("notes.txt"))

        assert conf.port == 8080


class TestPrecedence:
    """File values are defaults; the environment overrides where allowed."""

    class Conf(BaseModel):
        port: Annotated[int, Json("port"), Env("PORT")] = 0
        username: Annotated[str, Json("username"), Env("USERNAME", overwrite=True)] = ""

    def test_file_and_env(self, clean_env, workdir, write_file):
        write_file(workdir / "defaults.json", '{"port":8080,"username":"default_user"}')
        clean_env.setenv("USERNAME", "sustainyfacts")
        clean_env.setenv("PORT", "9090")

        conf = self.Conf()
        read(conf, with_file("defaults.json"))

        assert conf == self.Conf(port=8080, username="sustainyfacts")

    def test_env_fills_what_file_left_out(self, clean_env, workdir, write_file):
        write_file(workdir / "defaults.json", '{"username":"default_user"}')
        clean_env.setenv("PORT", "9090")

        conf = self.Conf()
        read(conf, with_file("defaults.json"))

        assert conf.port == 9090
        assert conf.username == "default_user"

    def test_global_prefix(self, clean_env, workdir):
        clean_env.setenv("APP_PORT", "7000")
        clean_env.setenv("PORT", "1")

        conf = read(self.Conf(), with_env_prefix("APP_"))

        assert conf.port == 7000


class TestEntryPoints:
    """Both entry points behave the same."""

    def test_options_and_value_agree(self, clean_env, workdir, write_file):
        write_file(workdir / "myconfig.json", '{"port":8080,"username":"sustainyfacts"}')

        by_function = read(JsonConfig(), with_file("myconfig.json"))
        by_value = read_with_options(JsonConfig(), LoadOptions(file="myconfig.json"))

        assert by_function == by_value

    def test_idempotent(self, clean_env, workdir, write_file):
        write_file(workdir / "myconfig.json", '{"port":8080}')
        clean_env.setenv("USERNAME", "sustainyfacts")

        class Conf(BaseModel):
            port: Annotated[int, Json("port")] = 0
            username: Annotated[str, Env("USERNAME")] = ""

        first = read(Conf(), with_file("myconfig.json"))
        second = read(Conf(), with_file("myconfig.json"))

        assert first == second == Conf(port=8080, username="sustainyfacts")


class Server(BaseModel):
    port: Annotated[int, Env("PORT"), Field(ge=0)] = 0
    hostname: Annotated[str, Json("host"), Yaml("host"), Env("USERNAME"), Hostname] = ""


class Logging(BaseModel):
    environment: Annotated[
        str, Json("env"), Yaml("env"), Env("ENV", overwrite=True), OneOf("prod", "staging", "dev")
    ] = ""
    level: Annotated[str, Env("LEVEL"), OneOf("debug", "info", "warn", "error")] = ""


class FullConfig(BaseModel):
    server: Annotated[Server, Env(prefix="SERVER_")] = Field(default_factory=Server)
    logging: Annotated[Logging, Env(prefix="LOGGING_")] = Field(default_factory=Logging)


class TestFullExample:
    """Nested records, prefixes, overwrite and validation together."""

    CONFIG = (
        "# This is an example yaml config file\n"
        "server:\n"
        "  host: example.com\n"
        "logging:\n"
        "  env: dev\n"
        "  level: debug\n"
    )

    def test_full_example(self, clean_env, workdir, write_file):
        write_file(workdir / "config.yaml", self.CONFIG)
        clean_env.setenv("LOGGING_ENV", "prod")
        clean_env.setenv("SERVER_PORT", "8080")

        conf = read(FullConfig(), with_file("config.yaml"))

        assert conf == FullConfig(
            server=Server(port=8080, hostname="example.com"),
            logging=Logging(environment="prod", level="debug"),
        )

    def test_invalid_nested_value(self, clean_env, workdir, write_file):
        write_file(workdir / "config.yaml", self.CONFIG)
        clean_env.setenv("LOGGING_ENV", "qa")

        with pytest.raises(ConfigValidationError) as exc_info:
            read(FullConfig(), with_file("config.yaml"))
        assert exc_info.value.fields == ["logging.environment"]


class TestLogging:
    """Loads are logged without leaking values."""

    def test_failure_is_logged(self, clean_env, workdir, caplog):
        clean_env.setenv("PORT", "eighty")

        with caplog.at_level(logging.WARNING, logger="layerconfig"):
            with pytest.raises(EnvOverlayError):
                read(EnvConfig())

        assert "Configuration load failed" in caplog.text
        assert "error_type=EnvOverlayError" in caplog.text

    def test_stages_logged_at_debug(self, clean_env, workdir, caplog):
        clean_env.setenv("USERNAME", "s3cret-user")

        with caplog.at_level(logging.DEBUG, logger="layerconfig"):
            read(EnvConfig())

        assert "Stage environment completed" in caplog.text
        assert "Stage validation completed" in caplog.text
        assert "s3cret-user" not in caplog.text

    def test_failure_log_omits_file_contents(self, workdir, write_file, caplog):
        write_file(workdir / "config.yaml", "port: 8080\napi_key: s3cret-key: broken\n")

        with caplog.at_level(logging.WARNING, logger="layerconfig"):
            with pytest.raises(DecodeError):
                read(YamlConfig(), with_file("config.yaml"))

        assert "error_type=DecodeError" in caplog.text
        assert "line=2" in caplog.text
        assert "s3cret-key" not in caplog.text
