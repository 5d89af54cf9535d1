"""BDD step definitions for label and app name features."""

import os
from dataclasses import dataclass, field

import pytest
from pytest_bdd import given, parsers, then, when

from hastur.client import HasturClient
from hastur.core.labels import LabelResolver
from hastur.core.models import Message
from tests.helpers import RecordingScheduler, TransportRecorder


@dataclass
class LabelScenarioContext:
    """Shared state between steps in a label scenario."""

    environ: dict[str, str] = field(default_factory=dict)
    transports: TransportRecorder = field(default_factory=TransportRecorder)
    client: HasturClient | None = None
    argv0: str | None = None

    def messages(self) -> list[Message]:
        return [m for t in self.transports.built for m in t.messages()]

    def message(self, number: int) -> Message:
        return self.messages()[number - 1]

    def require_client(self) -> HasturClient:
        assert self.client is not None, "no client configured"
        return self.client


@pytest.fixture
def ctx() -> LabelScenarioContext:
    """Fresh scenario context for each test."""
    return LabelScenarioContext()


# === Given ===
@given(parsers.re(r'a client for the app "(?P<name>.*)"'))
def step_client(ctx: LabelScenarioContext, name: str) -> None:
    resolver = LabelResolver(app_name=name, environ=ctx.environ)
    ctx.client = HasturClient(
        transport_factory=ctx.transports,
        scheduler=RecordingScheduler(),
        resolver=resolver,
    )


@given(parsers.parse('the process was invoked as "{argv0}"'))
def step_invoked_as(ctx: LabelScenarioContext, argv0: str) -> None:
    ctx.client = HasturClient(
        transport_factory=ctx.transports,
        scheduler=RecordingScheduler(),
        resolver=LabelResolver(environ=ctx.environ, argv0=argv0),
    )


@given(parsers.parse('the default label "{key}" with value "{value}"'))
def step_given_default_label(ctx: LabelScenarioContext, key: str, value: str) -> None:
    ctx.require_client().add_default_labels({key: value})


# === When ===
@when(parsers.parse('I send a mark named "{name}"'))
def step_send_mark(ctx: LabelScenarioContext, name: str) -> None:
    ctx.require_client().mark(name, "")


@when(parsers.parse('I send a mark labelled "{key}" set to "{value}"'))
def step_send_mark_with_label(ctx: LabelScenarioContext, key: str, value: str) -> None:
    ctx.require_client().mark("labelled", "", labels={key: value})


@when(parsers.parse('I add the default label "{key}" with value "{value}"'))
def step_add_default_label(ctx: LabelScenarioContext, key: str, value: str) -> None:
    ctx.require_client().add_default_labels({key: value})


@when(parsers.parse('I remove the default label "{key}"'))
def step_remove_default_label(ctx: LabelScenarioContext, key: str) -> None:
    ctx.require_client().remove_default_labels(key)


@when(parsers.re(r'I set the app name to "(?P<name>.*)"'))
def step_set_app_name(ctx: LabelScenarioContext, name: str) -> None:
    ctx.require_client().set_app_name(name)


@when(parsers.parse('I set the environment variable HASTUR_APP_NAME to "{value}"'))
def step_set_env(ctx: LabelScenarioContext, value: str) -> None:
    ctx.environ["HASTUR_APP_NAME"] = value


# === Then ===
@then(parsers.parse('message {number:d} has the label "{key}" with value "{value}"'))
def step_has_label(ctx: LabelScenarioContext, number: int, key: str, value: str) -> None:
    assert ctx.message(number)["labels"][key] == value


@then(parsers.parse('message {number:d} does not have the label "{key}"'))
def step_lacks_label(ctx: LabelScenarioContext, number: int, key: str) -> None:
    assert key not in ctx.message(number)["labels"]


@then(parsers.parse('message {number:d} has the current process id as "pid"'))
def step_has_pid(ctx: LabelScenarioContext, number: int) -> None:
    assert ctx.message(number)["labels"]["pid"] == os.getpid()
