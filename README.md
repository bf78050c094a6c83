# azurite

Front-end pieces for the Azurite programming language:

- `azurite.tokens`: `Span`, `TokenKind` and `Token`.
- `azurite.lexer`: turns source text into tokens.
- `azurite.ast`: the syntax tree node classes and `node_span`.
- `azurite.parser_core`: a Pratt-style parser for expressions, blocks, types
  and match patterns.
- `azurite.manifest`: reads `azurite.toml` project manifests.
- `azurite.resolver`: fetches dependencies, keeps the `azurite.lock` lockfile,
  and finds the entry file of a dependency.

The package has no dependencies outside the standard library.

## Installation

```
pip install .
```

To get the test dependencies as well, use `pip install .[test]`.

## Tokenizing

```python
from azurite.lexer import Lexer, LexError, tokenize

tokens = tokenize("let x = 42")
print([str(t) for t in tokens])          # ['let', 'x', '=', '42', 'EOF']
print(tokens[1].kind, tokens[1].value)   # identifier x

try:
    Lexer('"unterminated').tokenize()
except LexError as exc:
    print(exc)  # unterminated string literal at line 1, col 1
```

Every token list ends with an `EOF` token. Each token records its `Span`:
start and end offsets, plus a line and a column.

The lexer reports errors in two ways:

- A character it does not recognise, such as `~` or `@`, becomes a
  `TokenKind.ERROR` token. Tokenizing then goes on.
- An unterminated string or char literal, an invalid escape, or an integer
  that does not fit in 64 bits raises `LexError`.

Comments are `// ...` and `/* ... */`. A `#` is a token, not a comment.

Strings may use the escapes `\n \t \r \\ \" \' \0`. A string opened with
`"""` is a docstring: it runs up to the closing `"""` and its escapes are not
processed.

Interpolation is expanded before tokenizing. `"Hello \{name}"` is rewritten
as `"Hello " + name`. `preprocess_interpolation` does this rewrite on its own.

## Parsing expressions

```python
from azurite import ast
from azurite.lexer import tokenize
from azurite.parser_core import ExpressionParser, ParseError

expr = ExpressionParser(tokenize("1 + 2 * 3")).parse_expr(0)
assert isinstance(expr, ast.Binary) and expr.op is ast.BinOp.ADD

ty = ExpressionParser(tokenize("Box<Pair<int, string>>")).parse_type()
pattern = ExpressionParser(tokenize("Option.Some(v)")).parse_pattern()

try:
    ExpressionParser(tokenize("1 +")).parse_expr(0)
except ParseError as exc:
    print(exc, exc.span)
```

`ExpressionParser` handles the following:

- Literals and identifiers.
- Unary and binary operators, following the binding powers in
  `infix_binding_power` and `prefix_binding_power`.
- Calls, method calls and field access, including the null-safe `?.`.
- Indexing and slices (`a[i]`, `a[i:j]`, `a[:j]`, `a[i:]`).
- Ranges (`a..b`), arrays, tuples and the ternary `c ? a : b`.
- `if`, `while`, `match` and `switch` expressions, and `{ ... }` blocks.

Some constructs are rewritten while parsing:

- `x += 1` becomes `x = x + 1`. The same holds for `-= *= /= %= &= |= ^= <<= >>=`.
- `++x` and `--x` become `x = x + 1` and `x = x - 1`.
- `a < b == c` becomes `(a < b) and (b == c)`.

`node_span` in `azurite.ast` gives the best-known source span of an
expression or statement node.

## What the package does not do

This package has no statement-level parser. It does not build a whole
`ast.Program` from source text. Inside a block, `ExpressionParser` accepts
only expression statements. It does not parse declarations or other
statements, so `let`, `func`, `class`, `enum`, `for`, `loop`, `import`,
`return`, `break`, `continue`, `try` and `throw` are not handled. The
statement node classes exist in `azurite.ast`, but nothing here produces
them.

There is also no type checker, no code generator and no command-line tool.

## Manifests and dependencies

```python
from pathlib import Path
from azurite.manifest import parse_manifest
from azurite.resolver import find_dep_entry, resolve_dependencies

manifest = parse_manifest(Path("azurite.toml").read_text())
deps, lock_entries = resolve_dependencies(manifest, Path("."), False)
for name, directory in deps.items():
    print(name, find_dep_entry(directory))
```

`parse_manifest` reads the `[package]` section (`name` and `version`) and the
`[dependencies]` section. Each dependency is an inline table with `git`,
`path` and/or `rev`. A value that is not quoted raises `ManifestError`.

`resolve_dependencies` handles each kind of dependency:

- A path dependency is resolved relative to the project directory, and the
  path must exist.
- A git dependency is cloned into `~/.azurite/cache` (this needs `git` on
  `PATH`).
  - With `force_update` set, it is fetched and reset to `origin/HEAD`.
  - Without `force_update`, its commit is compared with the one in the
    lockfile. A mismatch prints a warning to stderr.
  - If `rev` is given, that revision is checked out.

After resolving, the function writes `azurite.lock` again. Failures raise
`ResolveError`. `load_lockfile` and `save_lockfile` read and write the
lockfile directly, as a list of `LockEntry` values.

`find_dep_entry` looks for these files in order and returns the first one it
finds:

1. `src/lib.az`
2. `main.az`
3. `src/main.az`

If none exists, it raises `ResolveError`.

## Running the tests

```
pytest
```