import math

import pytest

from gos.environment import Environment
from gos.errors import (
    GosError, EvalError, TypeMismatchError, UndefinedError, DivisionByZeroError, ImportFailure,
)
from gos.interpreter import Interpreter, run_program
from gos.parser import parse_program
from gos.values import MapVal, FunctionVal


def test_arithmetic_and_coercion():
    assert run_program('1 + 2 * 3') == 7
    assert run_program('(1 + 2) * 3') == 9
    assert run_program('2 * 3 + 4 * 5') == 26
    assert run_program('1 + 2.5') == 3.5
    assert run_program('-7 / 2') == -3
    assert run_program('7 / -2') == -3


def test_string_concatenation():
    assert run_program('"x=" + 1') == 'x=1'
    assert run_program('"x=" + 1.5') == 'x=1.5'
    assert run_program('"a" + "b"') == 'ab'
    with pytest.raises(TypeMismatchError):
        run_program('"a" - "b"')
    with pytest.raises(TypeMismatchError):
        run_program('1 + "a"')


def test_comparisons_and_booleans():
    assert run_program('1 < 2.5') is True
    assert run_program('3 >= 3') is True
    assert run_program('true == false') is False
    assert run_program('true != false') is True
    assert run_program('!true') is False
    with pytest.raises(TypeMismatchError):
        run_program('true < false')
    with pytest.raises(TypeMismatchError):
        run_program('!1')


def test_logical_operators_short_circuit():
    # the right side would be an undefined identifier
    assert run_program('false and missing') is False
    assert run_program('true or missing') is True
    assert run_program('true and 1 < 2') is True
    with pytest.raises(TypeMismatchError):
        run_program('1 and true')


def test_division_by_zero():
    with pytest.raises(DivisionByZeroError) as exc:
        run_program('1 / 0')
    assert exc.value.kind == 'ArithmeticError'
    assert run_program('1.0 / 0') == math.inf
    assert run_program('-1 / 0.0') == -math.inf
    assert math.isnan(run_program('0.0 / 0'))


def test_ranges():
    assert run_program('1..5') == [1, 2, 3, 4, 5]
    assert run_program('5..1') == [5, 4, 3, 2, 1]
    assert run_program('1..10:2') == [1, 3, 5, 7, 9]
    # the sign of the step follows the direction of the range
    assert run_program('1..10:-2') == [1, 3, 5, 7, 9]
    assert run_program('10..1:2') == [10, 8, 6, 4, 2]
    assert run_program('3..3') == [3]
    with pytest.raises(TypeMismatchError):
        run_program('1..5:0')
    with pytest.raises(TypeMismatchError):
        run_program('1..2.5')


def test_recursive_function():
    assert run_program('fn f(n) { if n <= 1 { 1 } n * f(n-1) }\nf(5)') == 120


def test_nil_if_does_not_return_early():
    source = 'fn f(n) { if n > 10 { "big" }\n"small" }\nf(3)'
    assert run_program(source) == 'small'


def test_closures_capture_definition_scope():
    source = '''
    fn adder(n) {
        fn add(x) { x + n }
        return add
    }
    plus2 = adder(2)
    plus5 = adder(5)
    plus2(1) + plus5(1)
    '''
    assert run_program(source) == 9


def test_assignment_rebinds_visible_variable():
    source = '''
    total = 0
    fn bump() { total = total + 1 }
    bump()
    bump()
    total
    '''
    assert run_program(source) == 2


def test_parameters_shadow_globals():
    source = '''
    x = 1
    fn f(x) { x = x + 100 }
    f(5)
    x
    '''
    assert run_program(source) == 1


def test_function_and_variable_namespaces():
    # a variable and a function may share a name
    source = '''
    fn size() { 42 }
    size = 7
    size() + size
    '''
    assert run_program(source) == 49


def test_array_mutation_and_len():
    assert run_program('a = [1, 2, 3]\na[0] = 9\na') == [9, 2, 3]
    assert run_program('len([1, 2, 3])') == 3
    assert run_program('len("hello")') == 5
    assert run_program('len({1: 2})') == 1
    with pytest.raises(TypeMismatchError):
        run_program('len(5)')


def test_array_index_errors():
    with pytest.raises(TypeMismatchError):
        run_program('[1, 2][2]')
    with pytest.raises(TypeMismatchError):
        run_program('[1, 2][-1]')
    with pytest.raises(TypeMismatchError):
        run_program('[1, 2]["0"]')
    with pytest.raises(TypeMismatchError):
        run_program('5[0]')


def test_map_keys_are_typed():
    m = run_program('m = {1: "int", 1.0: "float", true: "bool", "1": "string"}\nm')
    assert isinstance(m, MapVal)
    assert len(m) == 4
    assert m.get(1) == 'int'
    assert m.get(1.0) == 'float'
    assert m.get(True) == 'bool'
    assert run_program('m = {}\nm["k"] = 1\nm["k"] = 2\nm["k"]') == 2
    assert run_program('{"a": 1}["b"]') is None
    with pytest.raises(TypeMismatchError):
        run_program('{[1]: 2}')


def test_swap():
    assert run_program('a = 1\nb = 2\nswap(a, b)\na * 10 + b') == 21
    assert run_program('xs = [1, 2, 3]\nswap(xs[0], xs[2])\nxs') == [3, 2, 1]
    assert run_program('m = {"a": 1}\nx = 5\nswap(m["a"], x)\nm["a"] * 10 + x') == 51


def test_for_loop_binds_in_current_scope():
    source = '''
    last = 0
    for v in [4, 5, 6] { last = v }
    [last, v]
    '''
    assert run_program(source) == [6, 6]


def test_for_loop_forms():
    assert run_program('s = 0\nfor i, v in [10, 20] { s = s + i * v }\ns') == 20
    assert run_program('out = ""\nfor c in "abc" { out = c + out }\nout') == 'cba'
    assert run_program('keys = ""\nfor k in {"x": 1, "y": 2} { keys = keys + k }\nkeys') == 'xy'
    assert run_program('n = 0\nfor k, v in {"x": 1, "y": 2} { n = n + v }\nn') == 3
    assert run_program('for x in [] { }') is None
    with pytest.raises(TypeMismatchError):
        run_program('for x in 5 { }')


def test_anonymous_functions_and_values():
    assert run_program('sq = fn(x) { x * x }\nsq(6)') == 36
    assert run_program('fn twice(f, x) { f(f(x)) }\nfn inc(n) { n + 1 }\ntwice(inc, 1)') == 3
    func = run_program('fn named() { }')
    assert isinstance(func, FunctionVal)
    assert func.name == 'named'


def test_return_without_value():
    assert run_program('fn f() { return }\nf()') is None


def test_call_errors():
    with pytest.raises(TypeMismatchError) as exc:
        run_program('fn f(a, b) { a }\nf(1)')
    assert 'expects 2 arguments' in exc.value.message
    with pytest.raises(TypeMismatchError):
        run_program('x = 5\nx()')


def test_undefined_identifier():
    with pytest.raises(UndefinedError) as exc:
        run_program('println(nope)')
    assert exc.value.kind == 'ReferenceError'
    assert 'nope' in exc.value.message
    with pytest.raises(UndefinedError):
        run_program('missing(1)')


def test_invalid_assignment_target():
    with pytest.raises(TypeMismatchError):
        run_program('1 = 2')


def test_if_condition_must_be_bool():
    with pytest.raises(TypeMismatchError):
        run_program('if 1 { 2 }')


def test_statements_before_an_error_have_run(capsys):
    with pytest.raises(EvalError):
        run_program('println("first")\n1 / 0\nprintln("never")')
    assert capsys.readouterr().out == 'first\n'


def test_deep_recursion_is_reported():
    with pytest.raises(EvalError) as exc:
        run_program('fn down(n) { down(n + 1) }\ndown(0)')
    assert exc.value.message == 'maximum recursion depth exceeded'


def test_display_formats(capsys):
    run_program('println([1, "a", 2.0], {"k": [true]}, fn f() { })\nprint(1, 2, "x", 3)')
    assert capsys.readouterr().out == '[1 a 2] map[k:[true]] <fn f>\n1 2x3'


def test_persistent_environment():
    interp = Interpreter()
    env = Environment()
    interp.run(parse_program('x = 40'), env)
    assert interp.run(parse_program('x + 2'), env) == 42
    assert env.get_variable('x') == 40


def test_import_splices_into_current_scope(tmp_path, monkeypatch):
    lib = tmp_path / 'lib.gos'
    lib.write_text('fn greet(n) { "hi " + n }\ngreeting = greet("bo")\n', encoding='utf-8')
    monkeypatch.chdir(tmp_path)
    assert run_program('import("lib.gos")\ngreeting + "!"') == 'hi bo!'


def test_import_errors(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ImportFailure) as exc:
        run_program('import("absent.gos")')
    assert exc.value.kind == 'ImportError'
    (tmp_path / 'loop.gos').write_text('import("loop.gos")\n', encoding='utf-8')
    interp = Interpreter()
    with pytest.raises(ImportFailure) as exc:
        interp.run_file(str(tmp_path / 'loop.gos'))
    assert 'circular' in exc.value.message


def test_debug_trace(tmp_path):
    debug_file = tmp_path / 'trace.txt'
    interp = Interpreter(debug_level=3, debug_file=str(debug_file))
    interp.run(parse_program('fn f(a) { a }\nx = f(1)'))
    interp.close()
    trace = debug_file.read_text(encoding='utf-8').splitlines()
    assert 'statement FuncLit' in trace
    assert 'define function f(a)' in trace
    assert 'call f(1)' in trace
    assert 'declare a = 1' in trace
    assert 'assign x = 1' in trace


def test_closures_see_later_assignments():
    source = '''
    base = 1
    fn addBase(x) { x + base }
    first = addBase(10)
    base = 100
    first * 1000 + addBase(10)
    '''
    # the body reads the binding, not a copy taken at definition time
    assert run_program(source) == 11110


def test_undecodable_files(tmp_path, monkeypatch):
    (tmp_path / 'bad.gos').write_bytes(b'x = "\xff\xfe"\n')
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ImportFailure) as exc:
        run_program('import("bad.gos")')
    assert 'cannot decode bad.gos' in exc.value.message
    with pytest.raises(GosError) as exc:
        Interpreter().run_file(str(tmp_path / 'bad.gos'))
    assert 'not valid UTF-8' in exc.value.message
