#!/usr/bin/env python3
"""
minicompiler.py
Single-file compiler pipeline for a tiny let/print language
(lexer -> recursive-descent parser with constant folding -> TAC IR
-> copy propagation / dead temporary elimination -> pseudo assembly).

All compiler state lives in a CompilationContext, so compiling twice in
one process never leaks temporaries or symbols between runs.
"""

import re
import sys
import string
import argparse
from collections import namedtuple

# =====================================================
# ERRORS
# =====================================================
class CompileError(Exception):
    phase = "Compile"

    def __init__(self, detail=None, token=None):
        super().__init__(detail or token)
        self.detail = detail
        self.token = token

    def __str__(self):
        if self.detail is None:
            return f"{self.phase} Error at token: {self.token}"
        return f"{self.phase} Error: {self.detail}"

class ParseError(CompileError):
    phase = "Syntax"

class SemanticError(CompileError):
    phase = "Semantic"

# =====================================================
# COMPILATION CONTEXT (symbols, temps, code buffers)
# =====================================================
class CompilationContext:
    def __init__(self):
        self.symbols = set()
        self.temp_count = 0
        self.tac = []
        self.value_map = {}   # declared name -> rhs text
        self.temp_map = {}    # temp name -> "left OP right"
        self.errors = []

    def new_temp(self):
        self.temp_count += 1
        return Operand('temp', f"t{self.temp_count}")

    def error(self, exc):
        self.errors.append(str(exc))

# =====================================================
# LEXER
# =====================================================
Token = namedtuple('Token', ['type', 'value', 'lineno'])

KEYWORDS = {'def', 'let', 'print', 'if', 'end'}
OPERATORS = {'+', '-', '*', '/', '^', '=', '(', ')', ','}
OPERATOR_CHARS = ''.join(re.escape(c) for c in sorted(OPERATORS))

class Lexer:
    token_specification = [
        ("OPERATOR",  f'[{OPERATOR_CHARS}]'),
        ("NEWLINE",   r'\n'),
        ("SKIP",      r'[^\S\n]+|;'),
        ("WORD",      rf'[^\s;{OPERATOR_CHARS}]+'),
    ]
    tok_regex = '|'.join(f'(?P<{n}>{p})' for n, p in token_specification)
    master_re = re.compile(tok_regex)

    def __init__(self, code):
        self.code = code
        self.lineno = 1
        self.tokens = []
        self._tokenize()

    def _tokenize(self):
        for mo in self.master_re.finditer(self.code):
            kind = mo.lastgroup
            val = mo.group()
            if kind == "OPERATOR":
                self.tokens.append(Token('OPERATOR', val, self.lineno))
            elif kind == "WORD":
                self.tokens.append(Token(classify_word(val), val, self.lineno))
            elif kind == "NEWLINE":
                self.lineno += 1

    def peek_all(self):
        return list(self.tokens)

def classify_word(word):
    if word in KEYWORDS:
        return 'KEYWORD'
    if word[0] in string.digits:
        return 'NUMBER'
    return 'IDENTIFIER'

def tokenize(source):
    return Lexer(source).peek_all()

# =====================================================
# IR (TAC)
# =====================================================
Operand = namedtuple('Operand', ['kind', 'text'])  # kind: 'const' | 'var' | 'temp'

BINARY_OPS = {'+': 'add', '-': 'sub', '*': 'mul', '/': 'div', '^': 'pow'}
OP_SYMBOLS = {name: sym for sym, name in BINARY_OPS.items()}

class TACInstruction:
    def __init__(self, op, dest=None, arg1=None, arg2=None):
        self.op = op
        self.dest = dest
        self.arg1 = arg1
        self.arg2 = arg2

    def rhs(self):
        if self.op == 'assign':
            return self.arg1.text
        return f"{self.arg1.text} {OP_SYMBOLS[self.op]} {self.arg2.text}"

    def __eq__(self, other):
        if not isinstance(other, TACInstruction):
            return NotImplemented
        return (self.op, self.dest, self.arg1, self.arg2) == \
            (other.op, other.dest, other.arg1, other.arg2)

    def __repr__(self):
        if self.op == 'print':
            return f"print {self.arg1.text}"
        return f"{self.dest.text} = {self.rhs()}"

INT_MIN = -2 ** 31
INT_MAX = 2 ** 31 - 1

def is_numeral(operand):
    return operand.text != '' and operand.text[0] in string.digits

def numeral_value(operand):
    # a numeral is valued by its leading digit run: "10abc" is 10
    digits = re.match(r'[0-9]+', operand.text).group().lstrip('0') or '0'
    if len(digits) > len(str(INT_MAX)):
        raise SemanticError(f"constant out of range: {operand.text}")
    return check_range(int(digits))

def check_range(value):
    if not INT_MIN <= value <= INT_MAX:
        raise SemanticError(f"constant out of range: {value}")
    return value

def fold(op, a, b):
    if op == 'add':
        return check_range(a + b)
    if op == 'sub':
        return check_range(a - b)
    if op == 'mul':
        return check_range(a * b)
    if op == 'div':
        if b == 0:
            raise SemanticError("division by zero in constant expression")
        return a // b
    # operands are non-negative, so any base above 1 overflows past 2 ** 31
    if a > 1 and b > 31:
        raise SemanticError(f"constant out of range: {a} ^ {b}")
    return check_range(a ** b)

# =====================================================
# EXPRESSION BUILDER (flat precedence, right-nested)
# =====================================================
def build_operand(tokens, index, ctx):
    tok = tokens[index] if index < len(tokens) else None
    if tok is not None and tok.type == 'OPERATOR' and tok.value == '(':
        result, index = build_expression(tokens, index + 1, ctx)
        if index >= len(tokens) or tokens[index].value != ')':
            raise ParseError("missing closing parenthesis")
        return result, index + 1
    if tok is not None and tok.type == 'IDENTIFIER':
        return Operand('var', tok.value), index + 1
    if tok is not None and tok.type == 'NUMBER':
        return Operand('const', tok.value), index + 1
    found = tok.value if tok is not None else 'end of input'
    raise ParseError(f"Expected operand but found: {found}")

def combine(op, left, right, ctx):
    if is_numeral(left) and is_numeral(right):
        value = fold(op, numeral_value(left), numeral_value(right))
        return Operand('const', str(value))
    temp = ctx.new_temp()
    instr = TACInstruction(op, dest=temp, arg1=left, arg2=right)
    ctx.tac.append(instr)
    ctx.temp_map[temp.text] = instr.rhs()
    return temp

def build_expression(tokens, index, ctx):
    """Build code for the expression starting at tokens[index].

    Every operator binds equally and the right operand is a whole
    expression, so ``a - b - c`` is ``a - (b - c)``. Operands are
    collected left to right (parenthesized ones emit their code as they
    are read) and then combined from the right end.
    Returns the operand holding the value and the index after it.
    """
    operand, index = build_operand(tokens, index, ctx)
    operands = [operand]
    ops = []
    while index < len(tokens) and tokens[index].type == 'OPERATOR' \
            and tokens[index].value in BINARY_OPS:
        ops.append(BINARY_OPS[tokens[index].value])
        operand, index = build_operand(tokens, index + 1, ctx)
        operands.append(operand)

    result = operands.pop()
    while ops:
        result = combine(ops.pop(), operands.pop(), result, ctx)
    return result, index

# =====================================================
# STATEMENT PARSER
# =====================================================
class Parser:
    def __init__(self, tokens, ctx):
        self.tokens = tokens
        self.ctx = ctx
        self.pos = 0

    def peek(self):
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return Token('EOF', '', None)

    def advance(self):
        tok = self.peek()
        self.pos += 1
        return tok

    def parse(self):
        try:
            while self.pos < len(self.tokens):
                self.statement()
        except CompileError as exc:
            self.ctx.error(exc)
            return False
        return True

    def statement(self):
        tok = self.advance()
        if tok.type != 'KEYWORD':
            raise ParseError(token=tok.value)
        if tok.value == 'let':
            self.let_statement()
        elif tok.value == 'print':
            self.print_statement()
        # 'end', 'def' and 'if' are accepted and produce nothing

    def let_statement(self):
        if self.peek().type != 'IDENTIFIER':
            raise ParseError("Missing variable name in declaration.")
        name = self.advance().value
        # declared before the rhs is built, so `let x = x + 1` passes
        self.ctx.symbols.add(name)

        eq = self.peek()
        if eq.type != 'OPERATOR' or eq.value != '=':
            raise ParseError("Missing '=' after variable declaration.")
        self.advance()

        result, self.pos = build_expression(self.tokens, self.pos, self.ctx)
        self.ctx.tac.append(TACInstruction('assign', dest=Operand('var', name), arg1=result))
        self.ctx.value_map[name] = result.text

    def print_statement(self):
        if self.peek().type != 'IDENTIFIER':
            raise ParseError("Invalid print statement.")
        name = self.advance().value
        if name not in self.ctx.symbols:
            raise SemanticError(f"Variable '{name}' used before declaration in print.")
        self.ctx.tac.append(TACInstruction('print', arg1=Operand('var', name)))

def parse(tokens, ctx):
    return Parser(tokens, ctx).parse()

# =====================================================
# OPTIMIZER: copy propagation + dead temporary elimination
# =====================================================
def optimize(tac):
    bindings = {}   # dest operand -> (op, arg1, arg2), already substituted
    optimized = []
    for instr in tac:
        if instr.op == 'print':
            optimized.append(instr)
            continue
        rhs = (instr.op, instr.arg1, instr.arg2)
        if instr.op == 'assign' and instr.arg1 in bindings:
            rhs = bindings[instr.arg1]
        bindings[instr.dest] = rhs
        if instr.dest.kind == 'temp':
            continue
        op, arg1, arg2 = rhs
        optimized.append(TACInstruction(op, dest=instr.dest, arg1=arg1, arg2=arg2))
    return optimized

# =====================================================
# ASSEMBLY EMISSION
# =====================================================
def tac_to_assembly(tac):
    asm = []
    for instr in tac:
        if instr.op == 'print':
            asm.append(f"print {instr.arg1.text}")
        elif instr.op == 'add':
            # only addition is expanded to register level
            asm.append(f"mov r0, {instr.arg1.text}")
            asm.append(f"mov r1, {instr.arg2.text}")
            asm.append("add r0, r1")
            asm.append(f"str r0, {instr.dest.text}")
        else:
            asm.append(f"mov {instr.dest.text}, {instr.rhs()}")
    return asm

emit = tac_to_assembly

# =====================================================
# COMPILER DRIVER
# =====================================================
def compile_source(code, verbose=True):
    ctx = CompilationContext()

    result = {
        'tokens': [],
        'tac': [],
        'optimized_tac': [],
        'asm': [],
        'errors': [],
        'symbol_table': [],
        'value_map': {},
        'temp_map': {},
    }

    if verbose:
        print("\nPerforming Lexical Analysis...")
    toks = tokenize(code)
    result['tokens'] = toks
    if verbose:
        print("\nTokens:")
        for tok in toks:
            print(f"Type: {tok.type}, Value: {tok.value}")

    if verbose:
        print("\nPerforming Syntax and Semantic Analysis...")
    ok = parse(toks, ctx)
    result['tac'] = ctx.tac
    result['symbol_table'] = sorted(ctx.symbols)
    result['value_map'] = ctx.value_map
    result['temp_map'] = ctx.temp_map
    if not ok:
        result['errors'] = ctx.errors.copy()
        if verbose:
            for err in ctx.errors:
                print(err)
        return result
    if verbose:
        print("Syntax and Semantic Analysis Passed: No Errors!")

    optimized = optimize(ctx.tac)
    result['optimized_tac'] = optimized
    if verbose:
        print("\nOptimized Intermediate Code:")
        for instr in optimized:
            print(repr(instr))

    asm = tac_to_assembly(optimized)
    result['asm'] = asm
    if verbose:
        print("\nGenerated Assembly Code:")
        for line in asm:
            print(line)

    return result

# =====================================================
# TEST PROGRAM
# =====================================================
TEST_PROGRAM = r'''
    let x = 10
    let y = 20
    let z = x + y
    print z
'''

def main(argv=None):
    argparser = argparse.ArgumentParser(description='compile a let/print program to pseudo assembly')
    argparser.add_argument('input', nargs='?', help='source file (defaults to the sample program)')
    argparser.add_argument('-q', '--quiet', help='print only the assembly listing', action='store_true')
    args = argparser.parse_args(argv)

    if args.input:
        with open(args.input) as f:
            code = f.read()
    else:
        code = TEST_PROGRAM

    result = compile_source(code, verbose=not args.quiet)
    if result['errors']:
        if args.quiet:
            for err in result['errors']:
                print(err, file=sys.stderr)
        return 1
    if args.quiet:
        for line in result['asm']:
            print(line)
    return 0

if __name__ == '__main__':
    sys.exit(main())
