"""Tests for host-side response handling and typed errors."""

import pytest

from meta_plugin.core.client import PluginResponse, parse_plan
from meta_plugin.lib.errors import (
    ErrorKind,
    PluginExecutionError,
    PluginLaunchError,
    PluginProtocolError,
)


class TestParsePlan:
    def test_plan_line(self):
        plan = parse_plan('{"plan":{"commands":[{"dir":"a","cmd":"git pull"}],"parallel":true}}\n')

        assert plan is not None
        assert plan.commands[0].cmd == "git pull"
        assert plan.parallel is True

    def test_plain_text(self):
        assert parse_plan("clean\n") is None

    def test_empty_output(self):
        assert parse_plan("") is None

    def test_json_that_is_not_a_plan(self):
        assert parse_plan('{"status": "clean"}') is None


class TestPluginResponse:
    def test_message_output(self):
        response = PluginResponse(exit_code=0, stdout="clean\n", stderr="")

        assert response.ok is True
        assert response.message == "clean"
        assert response.raise_for_status() is response

    def test_plan_has_no_message(self):
        plan = parse_plan('{"plan":{"commands":[]}}')
        response = PluginResponse(exit_code=0, stdout='{"plan":{"commands":[]}}\n', stderr="", plan=plan)
        assert response.message == ""

    def test_business_error(self):
        response = PluginResponse(exit_code=1, stdout="", stderr="Error: boom\n", plugin="git")

        with pytest.raises(PluginExecutionError) as exc_info:
            response.raise_for_status()

        err = exc_info.value
        assert err.exit_code == 1
        assert err.kind == ErrorKind.BUSINESS
        assert str(err) == "git: Error: boom"
        assert err.stderr == "Error: boom\n"

    def test_usage_error(self):
        response = PluginResponse(
            exit_code=1, stdout="", stderr="error: missing command\n\nmeta git <command>\n"
        )

        with pytest.raises(PluginExecutionError) as exc_info:
            response.raise_for_status()

        assert exc_info.value.kind == ErrorKind.USAGE
        assert exc_info.value.message == "error: missing command"

    def test_silent_failure_message(self):
        response = PluginResponse(exit_code=2, stdout="", stderr="")

        with pytest.raises(PluginExecutionError) as exc_info:
            response.raise_for_status()

        assert "exited with status 2" in str(exc_info.value)


class TestErrorKinds:
    def test_protocol_errors(self):
        assert PluginProtocolError("bad output").kind == ErrorKind.PROTOCOL
        assert PluginLaunchError("not found").kind == ErrorKind.PROTOCOL

    def test_plugin_prefix(self):
        assert str(PluginProtocolError("bad output", plugin="meta-git")) == "meta-git: bad output"
        assert str(PluginProtocolError("bad output")) == "bad output"
