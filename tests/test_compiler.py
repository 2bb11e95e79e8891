import minicompiler as mc


SAMPLE = "let x = 10; let y = 20; let z = x + y; print z"


# ---------- End to end ----------

def test_reference_program(compile_quiet):
    result = compile_quiet(SAMPLE)
    assert result["errors"] == []
    assert [repr(i) for i in result["optimized_tac"]] == [
        "x = 10", "y = 20", "z = x + y", "print z",
    ]
    assert result["asm"] == [
        "mov x, 10",
        "mov y, 20",
        "mov r0, x",
        "mov r1, y",
        "add r0, r1",
        "str r0, z",
        "print z",
    ]


def test_constant_program(compile_quiet):
    result = compile_quiet("let a = 10 - 3 - 2 print a")
    assert [repr(i) for i in result["optimized_tac"]] == ["a = 9", "print a"]


def test_semantic_error_stops_pipeline(compile_quiet):
    result = compile_quiet("print z let z = 1")
    assert result["errors"] == [
        "Semantic Error: Variable 'z' used before declaration in print."
    ]
    assert result["optimized_tac"] == []
    assert result["asm"] == []


def test_division_by_zero_is_reported(compile_quiet):
    result = compile_quiet("let a = 1 / 0")
    assert result["errors"] == ["Semantic Error: division by zero in constant expression"]


def test_compilations_do_not_share_state(compile_quiet):
    first = compile_quiet("let a = b + c")
    second = compile_quiet("let q = r + s")
    assert first["temp_map"] == {"t1": "b + c"}
    assert second["temp_map"] == {"t1": "r + s"}
    assert second["symbol_table"] == ["q"]


# ---------- Console listing ----------

def test_verbose_listing(capsys):
    mc.compile_source(SAMPLE)
    out = capsys.readouterr().out
    assert "Type: KEYWORD, Value: let" in out
    assert "Syntax and Semantic Analysis Passed: No Errors!" in out
    assert "Optimized Intermediate Code:\nx = 10\ny = 20\nz = x + y\nprint z\n" in out
    assert out.rstrip().endswith("str r0, z\nprint z")


def test_verbose_listing_on_error(capsys):
    mc.compile_source("let = 1")
    out = capsys.readouterr().out
    assert "Syntax Error: Missing variable name in declaration." in out
    assert "Generated Assembly Code:" not in out


# ---------- CLI ----------

def test_main_sample_program(capsys):
    assert mc.main(["-q"]) == 0
    out = capsys.readouterr().out
    assert out.splitlines()[-1] == "print z"


def test_main_reads_file(tmp_path, capsys):
    src = tmp_path / "prog.let"
    src.write_text("let a = 2 ^ 3\nprint a\n", encoding="utf-8")
    assert mc.main(["-q", str(src)]) == 0
    assert capsys.readouterr().out == "mov a, 8\nprint a\n"


def test_main_failure_exit_code(tmp_path, capsys):
    src = tmp_path / "bad.let"
    src.write_text("print nope\n", encoding="utf-8")
    assert mc.main(["-q", str(src)]) == 1
    assert "used before declaration" in capsys.readouterr().err


def test_huge_power_is_reported(compile_quiet):
    result = compile_quiet("let a = 10 ^ 5000")
    assert result["errors"] == ["Semantic Error: constant out of range: 10 ^ 5000"]
    assert result["asm"] == []
