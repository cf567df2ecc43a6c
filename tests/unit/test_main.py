from __future__ import annotations

import json
from pathlib import Path

import pytest
from ruamel.yaml import YAML

from tfradius import main as cli
from tfradius.core.config import ENV_GIT_TIMEOUT, ENV_GIT_TOKEN, ENV_MAX_TYPE_DEPTH
from tfradius.plugins.terraform.exceptions import ValidationError

VPC_TF = """
variable "cidr" {
  description = "The IPv4 CIDR block for the VPC."
  type        = string
  default     = "10.0.0.0/16"
}

variable "enable_nat_gateway" {
  description = "Should be true if you want to provision NAT Gateways."
  type        = bool
  default     = false
}
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (ENV_MAX_TYPE_DEPTH, ENV_GIT_TIMEOUT, ENV_GIT_TOKEN):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def vpc_module(tmp_path: Path) -> Path:
    module_dir = tmp_path / "terraform-aws-vpc"
    module_dir.mkdir()
    (module_dir / "variables.tf").write_text(VPC_TF)
    return module_dir


def _write_module(tmp_path: Path, body: str, name: str = "mod") -> Path:
    module_dir = tmp_path / name
    module_dir.mkdir()
    (module_dir / "variables.tf").write_text(body)
    return module_dir


class TestArguments:
    def test_defaults(self) -> None:
        args = cli.parse_arguments(["./modules/vpc"])
        assert args.source == "./modules/vpc"
        assert args.output_file is None
        assert args.namespace is None
        assert args.resource_type is None
        assert args.ref is None
        assert args.max_depth is None
        assert not args.debug and not args.verbose

    def test_all_flags(self) -> None:
        args = cli.parse_arguments(
            [
                "https://example.com/org/repo.git",
                "-o",
                "out.yaml",
                "--namespace",
                "Acme.Queue",
                "--resource-type",
                "queue",
                "--ref",
                "v1",
                "--max-depth",
                "8",
                "--debug",
            ]
        )
        assert args.output_file == Path("out.yaml")
        assert args.namespace == "Acme.Queue"
        assert args.resource_type == "queue"
        assert args.ref == "v1"
        assert args.max_depth == 8
        assert args.debug


class TestValidateInputs:
    @pytest.mark.parametrize("name", ["out.yaml", "out.yml", "OUT.YAML"])
    def test_yaml_suffix_accepted(self, name: str, tmp_path: Path) -> None:
        cli.validate_inputs("mod", tmp_path / name)

    def test_bad_suffix(self, tmp_path: Path) -> None:
        with pytest.raises(ValidationError) as exc_info:
            cli.validate_inputs("mod", tmp_path / "out.json")
        assert exc_info.value.context["field_name"] == "output_file"

    def test_directory_output(self, tmp_path: Path) -> None:
        out_dir = tmp_path / "dir.yaml"
        out_dir.mkdir()
        with pytest.raises(ValidationError, match="directory"):
            cli.validate_inputs("mod", out_dir)

    def test_empty_source(self) -> None:
        with pytest.raises(ValidationError):
            cli.validate_inputs(" ", None)


class TestMain:
    def test_writes_yaml_to_stdout(
        self, vpc_module: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        assert cli.main([str(vpc_module)]) == cli.EXIT_OK

        captured = capsys.readouterr()
        document = YAML(typ="safe").load(captured.out)
        assert document["namespace"] == "AWS.Network"
        assert list(document["types"]) == ["awsVpc"]
        assert "Converting Terraform module" in captured.err
        assert "Converting Terraform module" not in captured.out

    def test_writes_output_file(
        self, vpc_module: Path, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        output = tmp_path / "types" / "vpc.yaml"
        assert cli.main([str(vpc_module), "-o", str(output)]) == cli.EXIT_OK

        assert capsys.readouterr().out == ""
        document = YAML(typ="safe").load(output.read_text(encoding="utf-8"))
        assert document["namespace"] == "AWS.Network"

    def test_output_is_deterministic(
        self, vpc_module: Path, tmp_path: Path
    ) -> None:
        first = tmp_path / "a.yaml"
        second = tmp_path / "b.yaml"
        cli.main([str(vpc_module), "-o", str(first)])
        cli.main([str(vpc_module), "-o", str(second)])
        assert first.read_bytes() == second.read_bytes()

    def test_overrides(
        self, vpc_module: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        code = cli.main(
            [str(vpc_module), "--namespace", "Custom.Foo", "--resource-type", "bar"]
        )
        assert code == cli.EXIT_OK
        document = YAML(typ="safe").load(capsys.readouterr().out)
        assert document["namespace"] == "Custom.Foo"
        assert list(document["types"]) == ["bar"]

    def test_bad_output_suffix(self, vpc_module: Path, tmp_path: Path) -> None:
        output = tmp_path / "out.txt"
        assert cli.main([str(vpc_module), "-o", str(output)]) == cli.EXIT_VALIDATION
        assert not output.exists()

    def test_invalid_max_depth(self, vpc_module: Path) -> None:
        assert cli.main([str(vpc_module), "--max-depth", "0"]) == cli.EXIT_VALIDATION

    def test_missing_source(self, tmp_path: Path) -> None:
        assert cli.main([str(tmp_path / "missing")]) == cli.EXIT_SOURCE

    def test_directory_without_terraform(self, tmp_path: Path) -> None:
        empty = tmp_path / "empty"
        empty.mkdir()
        assert cli.main([str(empty)]) == cli.EXIT_TERRAFORM_DATA

    def test_invalid_hcl(self, tmp_path: Path) -> None:
        module_dir = _write_module(tmp_path, 'variable "x" {\n  type = \n')
        assert cli.main([str(module_dir)]) == cli.EXIT_TERRAFORM_DATA

    def test_reserved_variable_name(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        module_dir = _write_module(
            tmp_path, 'variable "application" {\n  type = string\n}\n'
        )
        output = tmp_path / "out.yaml"
        assert cli.main([str(module_dir), "-o", str(output)]) == cli.EXIT_ASSEMBLY
        assert not output.exists()
        assert "application" in capsys.readouterr().err

    def test_unsupported_default_expression(self, tmp_path: Path) -> None:
        module_dir = _write_module(
            tmp_path, 'variable "azs" {\n  default = tolist(["a"])\n}\n'
        )
        assert cli.main([str(module_dir)]) == cli.EXIT_UNSUPPORTED_TYPE

    def test_recursion_limit(self, tmp_path: Path) -> None:
        module_dir = _write_module(
            tmp_path,
            'variable "deep" {\n  type = list(list(list(string)))\n}\n',
        )
        assert (
            cli.main([str(module_dir), "--max-depth", "2"]) == cli.EXIT_RECURSION_LIMIT
        )

    def test_very_deep_type_reports_recursion_limit(self, tmp_path: Path) -> None:
        levels = 250
        nested = "list(" * levels + "string" + ")" * levels
        module_dir = tmp_path / "deep"
        module_dir.mkdir()
        (module_dir / "variables.tf.json").write_text(
            json.dumps({"variable": {"deep": {"type": nested}}})
        )
        assert cli.main([str(module_dir)]) == cli.EXIT_RECURSION_LIMIT

    def test_max_depth_from_environment(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        module_dir = _write_module(
            tmp_path,
            'variable "deep" {\n  type = list(list(list(string)))\n}\n',
        )
        monkeypatch.setenv(ENV_MAX_TYPE_DEPTH, "2")
        assert cli.main([str(module_dir)]) == cli.EXIT_RECURSION_LIMIT
