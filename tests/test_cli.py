"""Tests for the relopt CLI."""

import json

import pytest
from click.testing import CliRunner

from relopt.cli.relopt import ReloptRuntime, cli
from relopt.config import Config

COMPANY_CATALOGUE = """
Department:50:dept_id,50:dept_name,50
Employee:10000:emp_id,10000:dept_id,50:age,47
"""

QUERY = "SELECT emp_id,dept_name\nFROM Employee,Department\nWHERE dept_id=dept_id\n"


@pytest.fixture
def catalogue_file(tmp_path):
    path = tmp_path / "company.cat"
    path.write_text(COMPANY_CATALOGUE)
    return str(path)


@pytest.fixture
def runner():
    return CliRunner()


def test_runtime_optimises_query(company):
    runtime = ReloptRuntime(company, Config())
    plan = runtime.plan(QUERY)
    optimised = runtime.optimise(plan)

    assert optimised.output.tuple_count == 10000


def test_prints_both_plans(runner, catalogue_file):
    result = runner.invoke(cli, ["--catalogue", catalogue_file], input=QUERY)

    assert result.exit_code == 0, result.output
    assert (
        "Query Plan: PROJECT [emp_id,dept_name] "
        "(SELECT [dept_id=dept_id] ((Employee) TIMES (Department)))"
    ) in result.output
    assert (
        "Optimised Plan: PROJECT [emp_id,dept_name] "
        "((PROJECT [emp_id,dept_id] (Employee)) JOIN [dept_id=dept_id] (Department))"
    ) in result.output


def test_query_file(runner, catalogue_file, tmp_path):
    query_path = tmp_path / "employees.query"
    query_path.write_text(QUERY)

    result = runner.invoke(cli, ["--catalogue", catalogue_file, "-q", str(query_path)])

    assert result.exit_code == 0, result.output
    assert "Optimised Plan:" in result.output


def test_config_file_settings(runner, catalogue_file, tmp_path):
    config_path = tmp_path / "relopt.yaml"
    config_path.write_text(
        f"catalogue: {catalogue_file}\n"
        "optimizer:\n"
        "  enable_projection_pushdown: false\n"
    )

    result = runner.invoke(cli, ["-c", str(config_path)], input=QUERY)

    assert result.exit_code == 0, result.output
    assert (
        "Optimised Plan: PROJECT [emp_id,dept_name] "
        "((Employee) JOIN [dept_id=dept_id] (Department))"
    ) in result.output


def test_json_explain(runner, catalogue_file):
    result = runner.invoke(
        cli, ["--catalogue", catalogue_file, "--explain", "json"], input=QUERY
    )

    assert result.exit_code == 0, result.output
    explain_text = result.output.split("Optimised Plan:", 1)[1].split("\n", 1)[1]
    document = json.loads(explain_text)
    assert document["tuple_count"] == 10000


def test_text_explain(runner, catalogue_file):
    result = runner.invoke(
        cli, ["--catalogue", catalogue_file, "--explain", "text"], input=QUERY
    )

    assert result.exit_code == 0, result.output
    assert "  JOIN [dept_id=dept_id]  (T=10000;" in result.output


def test_unknown_relation_fails(runner, catalogue_file):
    result = runner.invoke(
        cli, ["--catalogue", catalogue_file], input="SELECT *\nFROM Payroll\n"
    )

    assert result.exit_code == 1
    assert "Named relation Payroll not found" in result.output


def test_unsupported_query_fails(runner, catalogue_file):
    result = runner.invoke(
        cli, ["--catalogue", catalogue_file], input="SELECT age FROM Employee WHERE age > 3\n"
    )

    assert result.exit_code == 1
    assert "error:" in result.output


def test_catalogue_required(runner):
    result = runner.invoke(cli, [], input=QUERY)

    assert result.exit_code == 2
    assert "No catalogue given" in result.output
