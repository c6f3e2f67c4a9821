"""Tests for the Java emitter."""

import pytest

from plc import emit
from plc.emit import to_java
from plc.errors import PlcError
from plc.parse import parse

PROGRAM = """\
VAL limit: Integer = 3;
LIST names: String = ["a", "b"];
VAR total: Decimal;
FUN greet(name: String) DO print("hi " + name); END
FUN main(): Integer DO
    LET i = 0;
    WHILE i < limit DO
        i = i + 1;
    END
    IF i == 3 DO print(i); ELSE print('x'); END
    SWITCH i
        CASE 1: print(1);
        DEFAULT print(2 ^ 3);
    END
    greet(names[0]);
    RETURN (i + 1) * 2;
END
"""

EXPECTED = """\
public class Main {

    final int limit = 3;
    String[] names = {"a", "b"};
    double total;

    public static void main(String[] args) {
        System.exit(new Main().main());
    }

    void greet(String name) {
        System.out.println("hi " + name);
    }

    int main() {
        int i = 0;
        while (i < limit) {
            i = i + 1;
        }
        if (i == 3) {
            System.out.println(i);
        } else {
            System.out.println('x');
        }
        switch (i) {
            case 1:
                System.out.println(1);
                break;
            default:
                System.out.println(Math.pow(2, 3));
        }
        greet(names[0]);
        return (i + 1) * 2;
    }

}
"""


def test_emit_program():
    assert emit(PROGRAM) == EXPECTED


def test_emit_without_globals():
    assert emit("FUN main(): Integer DO RETURN 0; END") == (
        "public class Main {\n"
        "\n"
        "    public static void main(String[] args) {\n"
        "        System.exit(new Main().main());\n"
        "    }\n"
        "\n"
        "    int main() {\n"
        "        return 0;\n"
        "    }\n"
        "\n"
        "}\n"
    )


def test_empty_bodies_stay_on_one_line():
    java = emit(
        "FUN noop(flag: Boolean, c: Character) DO END\n"
        "FUN main(): Integer DO WHILE FALSE DO END RETURN 0; END"
    )
    assert "    void noop(boolean flag, char c) {}\n" in java
    assert "        while (false) {}\n" in java


def test_literals():
    java = emit(
        "FUN show(x: Any) DO END\n"
        "FUN main(): Integer DO show(NIL); show(TRUE); show(1.50); show(-2); RETURN 0; END"
    )
    assert "show(null);" in java
    assert "show(true);" in java
    assert "show(1.50);" in java
    assert "show(-2);" in java
    assert "void show(Object x) {}" in java


def test_escapes():
    java = emit(
        'FUN main(): Integer DO print("a\\tb \\"q\\" \\\\"); print(\'\\\'\'); RETURN 0; END'
    )
    assert 'System.out.println("a\\tb \\"q\\" \\\\");' in java
    assert "System.out.println('\\'');" in java


def test_comparable_parameter():
    java = emit(
        "FUN same(a: Comparable, b: Integer): Boolean DO RETURN b == b; END\n"
        "FUN main(): Integer DO RETURN 0; END"
    )
    assert "boolean same(Comparable a, int b) {" in java


def test_unanalyzed_source_is_rejected():
    with pytest.raises(PlcError, match="has not been analyzed"):
        to_java(parse("FUN main(): Integer DO RETURN 0; END"))
