from dataclasses import dataclass

import pytest

from igniter.errors import TemplateError
from igniter.templates import TreeFile, file_mode, render, walk_tree


@dataclass
class Context:
    ReleaseImage: str
    EtcdCluster: str


def test_template_fields_are_substituted():
    name, data = render(
        "start.sh.template",
        b"image={{.ReleaseImage}} etcd={{.EtcdCluster}}",
        {"ReleaseImage": "X", "EtcdCluster": "a,b,c"},
    )

    assert name == "start.sh"
    assert data == b"image=X etcd=a,b,c"


def test_fields_can_be_read_from_attributes():
    _, data = render("a.template", b"{{ .ReleaseImage }}", Context("X", "a"))

    assert data == b"X"


def test_files_without_template_suffix_are_unchanged():
    assert render("motd", b"{{.ReleaseImage}}", {}) == ("motd", b"{{.ReleaseImage}}")


def test_missing_field_raises_template_error():
    with pytest.raises(TemplateError, match="no field 'PullSecret'"):
        render("secret.template", b"{{.PullSecret}}", {"ReleaseImage": "X"})


def test_unclosed_action_raises_template_error():
    with pytest.raises(TemplateError, match="secret:2: unclosed action"):
        render("secret.template", b"ok\n{{.PullSecret", {"PullSecret": "s"})


def test_invalid_utf8_template_raises_template_error():
    with pytest.raises(TemplateError, match="template x: contents are not valid UTF-8"):
        render("x.template", b"\xff{{.ReleaseImage}}", {"ReleaseImage": "X"})


def test_invalid_utf8_is_passed_through_when_not_a_template():
    assert render("blob", b"\xff\xfe", {}) == ("blob", b"\xff\xfe")


def test_unsupported_action_raises_template_error():
    with pytest.raises(TemplateError, match="unsupported action"):
        render("x.template", b"{{range .Items}}", {})


@pytest.mark.parametrize(
    "source, expected",
    [
        ("files/usr/local/bin/foo", (0o555, False)),
        ("files/etc/motd", (0o644, True)),
        ("files/etc/kubernetes/kubeconfig", (0o600, False)),
        ("files/bin", (0o600, False)),
    ],
)
def test_file_mode(source, expected):
    assert file_mode(source) == expected


def test_walk_renders_tree_depth_first(template_tree):
    context = {"ReleaseImage": "X", "EtcdCluster": "a,b", "PullSecret": "secret"}

    tree_files = list(walk_tree(template_tree / "bootstrap" / "files", "/", context))

    assert tree_files == [
        TreeFile("/etc/motd", 0o644, True, b"bootstrap node\n"),
        TreeFile("/etc/pull-secret", 0o600, False, b"secret"),
        TreeFile(
            "/usr/local/bin/start.sh",
            0o555,
            False,
            b"#!/bin/sh\nexec run --image=X --etcd=a,b\n",
        ),
    ]


def test_walk_propagates_template_errors(template_tree):
    with pytest.raises(TemplateError):
        list(walk_tree(template_tree / "bootstrap" / "files", "/", {}))
