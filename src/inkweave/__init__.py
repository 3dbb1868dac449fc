"""
Parser combinators for text, UTF-8 bytes and sequences.

See the objects for more explanations.

See the `inkweave.general` module for general purpose parsers, and `inkweave.grammar.json` for a complete grammar you can use as an example.

Defining parsers:
```
from inkweave import unit, just, any_of

digit = unit().filter(str.isdigit)
number = digit.many_with(1).input().map(lambda s: int(str(s)))
pair = number.then(just(",").expect().right(number))      # after `,`, a number is required
```

Using parsers:
```
result = pair.parse_at("1,2", 0)
if result:
    ... # `result` is a `Success` object: `result.output`, `result.at`
else:
    ... # `result` is an `Error` object: `result.inner`, `result.recover`, `result.at`

pair.parse("1,2")   # (1, 2), raises `ParseError` on failure
```

Recoverable failures make alternatives (`or_()`, `any_of()`, `optional()`, repetitions) backtrack and try something else. Fatal failures, created with `expect()`, go straight through them.
"""

import logging

import inkweave.const as const
import inkweave.main
from inkweave.slice import (
    Slice,
    TextSlice,
    Utf8Slice,
    ArraySlice,
    as_slice,
)
from inkweave.main import (
    Recover,
    Error,
    Success,
    ParseResult,
    RepetitionError,
    ParseError,
    Parser,
)
from inkweave.primitive import (
    identity,
    unit,
    just,
    end,
    any_of,
    lazy,
    recursive,
)
import inkweave.general as general

logging.getLogger(__name__).addHandler(logging.NullHandler())
