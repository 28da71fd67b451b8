import io

from n64model.exprcalc import main, run_expression


def _run(env, arg):
    out, err = io.StringIO(), io.StringIO()
    ok = run_expression(env, arg, out, err)
    return ok, out.getvalue(), err.getvalue()


def test_assignment_stores_value():
    env = {}
    ok, out, err = _run(env, "x = 2 + 3")
    assert ok
    assert env == {"x": 2 + 3}
    assert out.splitlines() == ["Expression: 2.000000 + 3.000000", "Result: 5"]
    assert err == ""


def test_plain_expression_leaves_env_unchanged():
    env = {"a": 4.0}
    ok, out, _ = _run(env, "a / 8")
    assert ok
    assert env == {"a": 4.0}
    result_line = out.splitlines()[-1]
    assert result_line.startswith("Result: ")
    assert float(result_line.split(": ", 1)[1]) == 4.0 / 8


def test_bad_assignment():
    env = {}
    ok, out, err = _run(env, "1x=2")
    assert not ok
    assert out == ""
    assert err == "Error: bad assignment: expected identifier, got number\n"
    assert env == {}


def test_bad_expression():
    ok, out, err = _run({}, "y=1+")
    assert not ok
    assert out == ""
    assert err == "Error: bad expression: unexpected token: end\n"


def test_eval_error_prints_expression_but_no_result():
    env = {}
    ok, out, err = _run(env, "z=1/0")
    assert not ok
    assert out.startswith("Expression: ")
    assert "Result" not in out
    assert err == "Error: could not evaluate: division by zero\n"
    assert env == {}


def test_undefined_variable_error():
    ok, _, err = _run({}, "q * 2")
    assert not ok
    assert err == "Error: could not evaluate: undefined identifier 'q'\n"


def test_main_chains_assignments(capsys):
    assert main(["a=4", "a*a"]) == 0
    captured = capsys.readouterr()
    results = [line for line in captured.out.splitlines() if line.startswith("Result: ")]
    assert results[-1] == "Result: 16"
    assert captured.err == ""


def test_main_reports_failure_but_continues(capsys):
    assert main(["1/0", "b=2", "b+b"]) == 1
    captured = capsys.readouterr()
    results = [line for line in captured.out.splitlines() if line.startswith("Result: ")]
    assert len(results) == 2
    assert float(results[-1].split(": ", 1)[1]) == 2.0 + 2.0
    assert "division by zero" in captured.err


def test_main_with_no_arguments_succeeds(capsys):
    assert main([]) == 0
    assert capsys.readouterr().out == ""