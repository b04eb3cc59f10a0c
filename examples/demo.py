"""Compile the example RenScript project and print the generated modules."""

import os

from renscript import CompileError, compile_script

HERE = os.path.dirname(os.path.abspath(__file__))


def main():
    for name in ("spinner", "patrol"):
        try:
            code = compile_script(name, root=HERE)
        except CompileError as e:
            print(f"{name}: {e}")
            continue
        print(code)


if __name__ == "__main__":
    main()
