# fuzzyfind

A simple fuzzy text selector for the terminal. It reads a list of
candidates from standard input, lets you narrow them down interactively by
typing a query, and prints the chosen candidate to standard output.

Matches are ranked with a scoring algorithm that favours consecutive
characters, the starts of words (after `/`, `-`, `_`, space or `.`),
capital letters following lower-case ones, and shorter candidates.
Matching ignores case for ASCII letters only. Candidates longer than 1024
characters still match, but are ranked below all others.

It needs a POSIX system: the interactive mode opens a terminal device
(by default `/dev/tty`) and puts it into raw mode.

## Installation

```
pip install .
```

## Usage

Pick a file interactively:

```
find . -type f | fuzzyfind
```

Print every match of a query, best first, without opening the interface:

```
find . -type f | fuzzyfind --show-matches=readme --show-scores
```

Input is split on newlines (or on NUL bytes with `-0`); empty entries are
skipped. Bytes that are not valid UTF-8 are passed through to the output
unchanged.

### Options

```
 -l, --lines=LINES        Specify how many lines of results to show (default 10)
 -p, --prompt=PROMPT      Input prompt (default '> ')
 -q, --query=QUERY        Use QUERY as the initial search string
 -e, --show-matches=QUERY Output the sorted matches of QUERY
 -t, --tty=TTY            Specify file to use as TTY device (default /dev/tty)
 -s, --show-scores        Show the scores of each match
 -0, --read-null          Read input delimited by ASCII NUL characters
 -j, --workers NUM        Accepted for compatibility; see below
 -i, --show-info          Show selection info line
 -h, --help               Display this help and exit
 -v, --version            Output version information and exit
```

`--lines` takes an integer of at least 3, or `max` to use as many lines as
the terminal allows. The number of lines shown is also limited by the
number of candidates and the terminal height.

`--benchmark[=N]` runs the `--show-matches` search N times (default 100)
and prints nothing; it is an error without `-e`.

### Keys

| Key                         | Action                           |
|-----------------------------|----------------------------------|
| Enter                       | Print the selection and exit     |
| Esc, Ctrl-C, Ctrl-D, Ctrl-G | Exit without a selection         |
| Up, Ctrl-P, Ctrl-K          | Previous match                   |
| Down, Ctrl-N, Ctrl-J, Tab   | Next match                       |
| Page Up / Page Down         | Move a page at a time            |
| Left / Right                | Move the cursor                  |
| Home, Ctrl-A / End, Ctrl-E  | Start / end of the query         |
| Backspace, Ctrl-H           | Delete a character               |
| Ctrl-W                      | Delete a word                    |
| Ctrl-U                      | Delete to the start of the query |

If nothing matches when Enter is pressed, the query itself is printed.
The exit status is 0 after a selection and 1 when the selector is left
without one.

## Library use

```python
from fuzzyfind.match import has_match, match, match_positions
from fuzzyfind.choices import Choices

has_match("amor", "app/models/order")        # True
score, positions = match_positions("amo", "app/models/foo")
# positions == [0, 4, 5]

choices = Choices(workers=1)
for name in ["tags", "test"]:
    choices.add(name)
choices.search("ts")
choices.get(0)                                # "test"
choices.score(0)                              # score of "test"
```

`fuzzyfind.options.parse_options` turns an argument list into an
`Options` dataclass, raising `ExitRequest` for `--help`, `--version` and
unknown options, and `OptionsError` for invalid values.

## Limitations

Searching runs in a single thread. The `-j/--workers` option is parsed
and validated, and its value is recorded on `Choices.worker_count`, but it
does not change how the search is carried out.

## Running the tests

```
pip install .[test]
pytest
```