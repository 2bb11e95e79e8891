import minicompiler as mc


def assemble(src):
    ctx = mc.CompilationContext()
    assert mc.parse(mc.tokenize(src), ctx), ctx.errors
    return mc.emit(mc.optimize(ctx.tac))


def test_addition_expands_to_registers():
    assert assemble("let z = x + y") == [
        "mov r0, x", "mov r1, y", "add r0, r1", "str r0, z",
    ]


def test_plain_assignment_is_mov():
    assert assemble("let x = 10") == ["mov x, 10"]


def test_other_operators_are_single_mov():
    assert assemble("let a = x - y") == ["mov a, x - y"]
    assert assemble("let a = x * y") == ["mov a, x * y"]
    assert assemble("let a = x / y") == ["mov a, x / y"]
    assert assemble("let a = x ^ y") == ["mov a, x ^ y"]


def test_print():
    assert assemble("let a = 1 print a") == ["mov a, 1", "print a"]


def test_emit_does_not_optimize():
    code = [
        mc.TACInstruction("add", dest=mc.Operand("temp", "t1"),
                          arg1=mc.Operand("const", "1"), arg2=mc.Operand("const", "2")),
    ]
    assert mc.tac_to_assembly(code) == [
        "mov r0, 1", "mov r1, 2", "add r0, r1", "str r0, t1",
    ]
