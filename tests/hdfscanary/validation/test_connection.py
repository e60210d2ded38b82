"""Tests for connection validation: URI resolution, security and connection failures."""

import pytest
from hypothesis import HealthCheck, given, settings, strategies as st

from hdfscanary.config import keys
from hdfscanary.issues import Errors
from hdfscanary.security.identity import AuthenticationMethod
from hdfscanary.security.provider import HadoopSecurityProvider
from hdfscanary.security.resolver import SecurityContextResolver
from hdfscanary.validation.connection import ConnectionValidator


def _codes(state):
    return [issue.error_code for issue in state.issues]


hosts = st.from_regex(r"[a-z][a-z0-9-]{0,20}(\.[a-z][a-z0-9]{0,10}){0,2}", fullmatch=True)
ports = st.integers(min_value=1, max_value=65535)


@settings(max_examples=30, deadline=None, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(scheme=st.sampled_from(["hdfs", "viewfs"]), host=hosts, port=ports)
def test_valid_explicit_uri_becomes_target_and_default_fs(make_validator, make_factory, make_settings, scheme, host, port):
    uri = f"{scheme}://{host}:{port}"
    factory = make_factory()

    state = make_validator(factory=factory).validate(make_settings(hdfs_uri=uri))

    assert state.valid, state.issues
    assert state.target_uri == uri
    assert state.config[keys.FS_DEFAULT_NAME_KEY] == uri
    assert factory.opened[0][1][keys.FS_DEFAULT_NAME_KEY] == uri


@pytest.mark.parametrize("uri", ["namenode:8020", "/user/sdc", "hdfs:/namenode"])
def test_uri_without_scheme_separator_reports_one_issue(make_validator, make_settings, fs_factory, uri):
    state = make_validator().validate(make_settings(hdfs_uri=uri))

    assert not state.valid
    assert _codes(state) == [Errors.HADOOPFS_18]
    assert state.issues[0].field == "hdfsTargetConfigBean.hdfsUri"
    assert state.connection is None
    assert fs_factory.opened == []


@pytest.mark.parametrize(
    "uri",
    [
        "hdfs://namenode:99999",
        "hdfs://namenode:port",
        "://namenode:8020",
        "hdfs://bad host:8020",
        "hdfs://namenode:8020/data\tout",
        "hdfs://:8020",
        "hdfs://namenode:8020/a%zz",
        "hdfs://namenode:8020/dir^x",
    ],
)
def test_unparsable_uri_is_reported(make_validator, make_settings, fs_factory, uri):
    state = make_validator().validate(make_settings(hdfs_uri=uri))

    assert not state.valid
    assert _codes(state) == [Errors.HADOOPFS_22]
    assert state.issues[0].field is None
    assert fs_factory.opened == []


def test_missing_uri_is_reported_exactly_once(make_validator, make_settings, fs_factory):
    state = make_validator().validate(make_settings())

    assert not state.valid
    assert _codes(state) == [Errors.HADOOPFS_61]
    assert state.target_uri == ""
    assert fs_factory.opened == []


def test_default_fs_from_site_file_is_used(make_validator, make_settings, resources_dir, write_site_file):
    conf_dir = resources_dir / "conf"
    conf_dir.mkdir()
    write_site_file(conf_dir / "core-site.xml", {keys.FS_DEFAULT_NAME_KEY: "hdfs://site-nn:8020"})

    state = make_validator().validate(make_settings(hdfs_conf_dir="conf"))

    assert state.valid, state.issues
    assert state.target_uri == "hdfs://site-nn:8020"


def test_site_file_without_default_fs_reports_unset_uri(make_validator, make_settings, resources_dir, write_site_file):
    conf_dir = resources_dir / "conf"
    conf_dir.mkdir()
    write_site_file(conf_dir / "hdfs-site.xml", {"dfs.replication": "1"})

    state = make_validator().validate(make_settings(hdfs_conf_dir="conf"))

    assert _codes(state) == [Errors.HADOOPFS_49]


def test_explicit_uri_beats_site_file(make_validator, make_settings, resources_dir, write_site_file):
    conf_dir = resources_dir / "conf"
    conf_dir.mkdir()
    write_site_file(conf_dir / "core-site.xml", {keys.FS_DEFAULT_NAME_KEY: "hdfs://site-nn:8020"})

    state = make_validator().validate(make_settings(hdfs_uri="hdfs://explicit:8020", hdfs_conf_dir="conf"))

    assert state.target_uri == "hdfs://explicit:8020"
    assert state.config[keys.FS_DEFAULT_NAME_KEY] == "hdfs://explicit:8020"


def test_connection_is_opened_as_acting_identity(make_validator, make_settings, fs_factory, fake_fs):
    state = make_validator().validate(make_settings(hdfs_uri="hdfs://nn:8020", hdfs_user="etl"))

    assert state.valid
    assert state.connection is fake_fs
    uri, config, identity = fs_factory.opened[0]
    assert uri == "hdfs://nn:8020"
    assert config[keys.HADOOP_SECURITY_AUTHENTICATION] == "SIMPLE"
    assert identity.user_name == "etl"
    assert identity.authentication_method == AuthenticationMethod.PROXY
    assert state.acting_identity == identity
    assert state.login_identity.user_name == "sdc"


def test_connection_failure_becomes_issue(make_validator, make_settings, make_factory, caplog):
    factory = make_factory(error=OSError("Connection refused"))

    state = make_validator(factory=factory).validate(make_settings(hdfs_uri="hdfs://nn:8020"))

    assert not state.valid
    assert _codes(state) == [Errors.HADOOPFS_01]
    assert state.issues[0].args == ("hdfs://nn:8020", "Connection refused")
    assert state.connection is None
    assert any(message.startswith("Validation Error:") for message in caplog.messages)


def test_security_failure_becomes_connection_issue(stage_context, make_settings, fs_factory, mocker):
    resolver = mocker.Mock()
    resolver.resolve.side_effect = RuntimeError("KDC unreachable")
    validator = ConnectionValidator(stage_context, resolver=resolver, fs_factory=fs_factory)

    state = validator.validate(make_settings(hdfs_uri="hdfs://nn:8020"))

    assert _codes(state) == [Errors.HADOOPFS_01]
    assert "KDC unreachable" in state.issues[0].message
    assert fs_factory.opened == []


def test_security_issues_end_validation(make_validator, make_settings, fs_factory, tmp_path):
    environ = {"HADOOP_USER_NAME": "sdc", "KRB5CCNAME": str(tmp_path / "no-ticket-cache")}

    state = make_validator(environ=environ).validate(make_settings(hdfs_uri="hdfs://nn:8020", hdfs_kerberos=True))

    assert not state.valid
    assert _codes(state) == [Errors.HADOOPFS_00]
    assert state.acting_identity is None
    assert fs_factory.opened == []


def test_kerberos_connection(make_validator, make_settings, fs_factory, kerberos_environ):
    state = make_validator(environ=kerberos_environ).validate(
        make_settings(hdfs_uri="hdfs://nn:8020", hdfs_kerberos=True)
    )

    assert state.valid, state.issues
    _, config, identity = fs_factory.opened[0]
    assert config[keys.HADOOP_SECURITY_AUTHENTICATION] == "KERBEROS"
    assert config[keys.DFS_NAMENODE_USER_NAME_KEY] == "hdfs/_HOST@EXAMPLE.COM"
    assert identity.authentication_method == AuthenticationMethod.KERBEROS


def test_merge_issues_prevent_connection(make_validator, make_settings, fs_factory):
    settings_with_bad_dir = make_settings(hdfs_uri="hdfs://nn:8020", hdfs_conf_dir="missing-conf")

    state = make_validator().validate(settings_with_bad_dir)

    assert not state.valid
    assert _codes(state) == [Errors.HADOOPFS_25]
    assert fs_factory.opened == []


def test_validation_is_repeatable(make_validator, make_settings):
    validator = make_validator()
    stage_settings = make_settings(hdfs_uri="hdfs://nn:8020")

    first = validator.validate(stage_settings)
    second = validator.validate(stage_settings)

    assert (first.target_uri, first.valid) == (second.target_uri, second.valid)
    assert dict(first.config) == dict(second.config)


def test_merge_failure_becomes_connection_issue(stage_context, make_settings, fs_factory, mocker):
    merger = mocker.Mock()
    merger.build.side_effect = OSError(36, "File name too long")
    validator = ConnectionValidator(stage_context, merger=merger, fs_factory=fs_factory)

    state = validator.validate(make_settings(hdfs_uri="hdfs://nn:8020", hdfs_conf_dir="conf"))

    assert not state.valid
    assert _codes(state) == [Errors.HADOOPFS_01]
    assert "File name too long" in state.issues[0].message
    assert state.target_uri == "hdfs://nn:8020"
    assert fs_factory.opened == []


def test_overlong_conf_dir_does_not_escape_validation(make_validator, make_settings, fs_factory):
    state = make_validator().validate(make_settings(hdfs_uri="hdfs://nn:8020", hdfs_conf_dir="x" * 300))

    assert not state.valid
    assert _codes(state) == [Errors.HADOOPFS_25]
    assert fs_factory.opened == []


def test_default_realm_comes_from_security_provider(stage_context, make_settings, fs_factory, kerberos_environ, mocker):
    provider = HadoopSecurityProvider(kerberos_environ)
    mocker.patch.object(provider, "get_default_realm", return_value="CORP.EXAMPLE.COM")
    validator = ConnectionValidator(stage_context, resolver=SecurityContextResolver(provider), fs_factory=fs_factory)

    state = validator.validate(make_settings(hdfs_uri="hdfs://nn:8020", hdfs_kerberos=True))

    assert state.valid, state.issues
    provider.get_default_realm.assert_called_once_with()
    assert fs_factory.opened[0][1][keys.DFS_NAMENODE_USER_NAME_KEY] == "hdfs/_HOST@CORP.EXAMPLE.COM"
