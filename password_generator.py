"""Secure password generator CLI with per-class character toggles.

Generates passwords of LENGTH characters (default 22) drawn uniformly, with
replacement, from the enabled character classes. Every position is picked with
`common.secure_random.random_index`, which rejection-samples OS entropy so no
character is favoured by modulo bias. The password is assembled in a mutable
buffer that is zeroed once it has been written out.

Options follow the classic `passgen` syntax: `+x` / `--enable-x` turns a class
on and `-x` / `--disable-x` turns it off, for x in lower, upper, number and
symbol. The last token may be the password length.
"""

from __future__ import annotations

import argparse
import logging
import string
import sys
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

from common.cli_helpers import (
    LOG_LEVELS,
    StderrHelpAction,
    add_log_level_argument,
    setup_logging,
)
from common.exceptions import (
    EmptyAlphabetError,
    EntropySourceError,
    ValidationError,
)
from common.secure_buffer import scrubbed_buffer, write_secret
from common.secure_random import RandomByteSource, random_index

logger = logging.getLogger(__name__)

DEFAULT_LENGTH = 22

EXIT_OK = 0
EXIT_ENTROPY_FAILURE = 1
EXIT_EMPTY_ALPHABET = 2
EXIT_OUT_OF_MEMORY = 3


@dataclass(frozen=True)
class CharacterClass:
    name: str  # used for the --enable-<name> / --disable-<name> flags
    label: str
    chars: str
    enabled_by_default: bool

    @property
    def flag(self) -> str:
        return self.name[0]


LOWER = CharacterClass("lower", "lowercase letters", string.ascii_lowercase, True)
UPPER = CharacterClass("upper", "uppercase letters", string.ascii_uppercase, True)
NUMBER = CharacterClass("number", "numbers", string.digits, True)
SYMBOL = CharacterClass("symbol", "symbols", string.punctuation, False)

# canonical concatenation order
CHARACTER_CLASSES: Tuple[CharacterClass, ...] = (LOWER, UPPER, NUMBER, SYMBOL)


@dataclass(frozen=True)
class PasswordOptions:
    length: int = DEFAULT_LENGTH
    lower: bool = LOWER.enabled_by_default
    upper: bool = UPPER.enabled_by_default
    number: bool = NUMBER.enabled_by_default
    symbol: bool = SYMBOL.enabled_by_default

    @property
    def alphabet(self) -> str:
        return build_alphabet(self.lower, self.upper, self.number, self.symbol)


def build_alphabet(
    include_lower: bool,
    include_upper: bool,
    include_number: bool,
    include_symbol: bool,
) -> str:
    """Concatenate the enabled character classes in canonical order.

    Returns an empty string when nothing is enabled; callers must reject that
    before sampling.
    """
    enabled = (include_lower, include_upper, include_number, include_symbol)
    return "".join(
        cls.chars for cls, include in zip(CHARACTER_CLASSES, enabled) if include
    )


def fill_password(
    buffer: bytearray,
    alphabet: str,
    source: Optional[RandomByteSource] = None,
) -> None:
    """Fill every position of `buffer` with a uniformly chosen alphabet byte.

    Raises:
        EmptyAlphabetError: If `alphabet` is empty (checked before any draw)
        EntropySourceError: If the random source fails; `buffer` is then
            partially filled and must not be used
    """
    if not alphabet:
        raise EmptyAlphabetError("No character classes enabled")

    logger.debug(
        f"Assembling {len(buffer)}-character password from "
        f"{len(alphabet)}-character alphabet"
    )
    limit = len(alphabet)
    for i in range(len(buffer)):
        buffer[i] = ord(alphabet[random_index(limit, source)])


def generate_password(
    length: int = DEFAULT_LENGTH,
    include_lower: bool = True,
    include_upper: bool = True,
    include_number: bool = True,
    include_symbol: bool = False,
    source: Optional[RandomByteSource] = None,
) -> str:
    """Return a password as a ``str``.

    The working buffer is scrubbed before returning; the returned string is
    the caller's to manage.
    """
    if length <= 0:
        raise ValidationError("length must be > 0")

    alphabet = build_alphabet(
        include_lower=include_lower,
        include_upper=include_upper,
        include_number=include_number,
        include_symbol=include_symbol,
    )
    with scrubbed_buffer(length) as buffer:
        fill_password(buffer, alphabet, source)
        return buffer.decode("ascii")


def parse_length(token: str) -> Optional[int]:
    """Parse a LENGTH token; None if it is not a positive integer."""
    try:
        value = int(token, 10)
    except ValueError:
        return None
    return value if value > 0 else None


def render_manual() -> str:
    """Help text laid out like the classic passgen manual page."""
    lines = [
        "NAME",
        "\tpassgen - password generator",
        "",
        "SYNOPSIS",
        "\tpassgen [OPTION...] [LENGTH]",
        "",
        "DESCRIPTION",
        "\tGenerate cryptographically secure passwords of LENGTH characters,",
        f"\tdefault length is {DEFAULT_LENGTH}.",
        "",
        "OPTIONS",
    ]
    for cls in CHARACTER_CLASSES:
        on_default = ", default" if cls.enabled_by_default else ""
        off_default = "" if cls.enabled_by_default else ", default"
        lines += [
            f"\t+{cls.flag}, --enable-{cls.name}",
            f"\t\tenables {cls.label} to be generated{on_default}",
            f"\t-{cls.flag}, --disable-{cls.name}",
            f"\t\tdisables {cls.label}{off_default}",
        ]
    lines += [
        f"\t--log-level {{{','.join(LOG_LEVELS)}}}",
        "\t\tdiagnostic verbosity on standard error, default INFO",
        "\t--help",
        "\t\tprints this message",
    ]
    return "\n".join(lines)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="passgen",
        usage=argparse.SUPPRESS,
        description=render_manual(),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        prefix_chars="-+",
        add_help=False,
        allow_abbrev=False,
    )

    classes = parser.add_argument_group("Character classes")
    for cls in CHARACTER_CLASSES:
        classes.add_argument(
            f"+{cls.flag}",
            f"--enable-{cls.name}",
            dest=cls.name,
            action="store_true",
            help=argparse.SUPPRESS,
        )
        classes.add_argument(
            f"-{cls.flag}",
            f"--disable-{cls.name}",
            dest=cls.name,
            action="store_false",
            help=argparse.SUPPRESS,
        )
    parser.set_defaults(
        **{cls.name: cls.enabled_by_default for cls in CHARACTER_CLASSES}
    )

    parser.add_argument("--help", action=StderrHelpAction, help=argparse.SUPPRESS)
    add_log_level_argument(parser, help=argparse.SUPPRESS)
    return parser


def flag_tokens() -> Set[str]:
    """Every exact token that toggles a class or asks for help."""
    flags = {"--help"}
    for cls in CHARACTER_CLASSES:
        flags.update(
            {
                f"+{cls.flag}",
                f"-{cls.flag}",
                f"--enable-{cls.name}",
                f"--disable-{cls.name}",
            }
        )
    return flags


def split_arguments(argv: Sequence[str]) -> Tuple[List[str], List[str]]:
    """Separate exact option tokens from everything else, keeping order.

    Only whole tokens are matched: `-ln`, `+lx` or `--enable-lower=1` are
    not options. `--log-level` is kept only together with a valid level.
    """
    flags = flag_tokens()
    tokens = list(argv)
    known: List[str] = []
    unknown: List[str] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if token in flags:
            known.append(token)
        elif (
            token == "--log-level"
            and i + 1 < len(tokens)
            and tokens[i + 1] in LOG_LEVELS
        ):
            known.extend(tokens[i : i + 2])
            i += 1
        elif token.startswith("--log-level=") and token.split("=", 1)[1] in LOG_LEVELS:
            known.append(token)
        else:
            unknown.append(token)
        i += 1
    return known, unknown


def parse_arguments(argv: Sequence[str]) -> Tuple[argparse.Namespace, List[str]]:
    """Parse recognised options; return them with the other tokens in order."""
    known, unknown = split_arguments(argv)
    return build_parser().parse_args(known), unknown


def resolve_options(
    args: argparse.Namespace, unknown: Sequence[str], argv: Sequence[str]
) -> PasswordOptions:
    """Build PasswordOptions, reporting tokens that were not understood.

    Only the final command-line token may be LENGTH, and only if it was not a
    recognised option. An unparsable LENGTH falls back to the default and is
    reported like any other unrecognised token.
    """
    length = DEFAULT_LENGTH
    leftovers = list(unknown)
    if argv and leftovers and leftovers[-1] == argv[-1]:
        parsed = parse_length(leftovers[-1])
        if parsed is not None:
            length = parsed
            leftovers.pop()

    for token in leftovers:
        logger.warning(f"Unrecognized option: {token}")

    return PasswordOptions(
        length=length,
        lower=args.lower,
        upper=args.upper,
        number=args.number,
        symbol=args.symbol,
    )


def main(argv: Optional[Sequence[str]] = None) -> int:
    tokens = list(sys.argv[1:] if argv is None else argv)
    args, unknown = parse_arguments(tokens)

    setup_logging(args.log_level)

    options = resolve_options(args, unknown, tokens)

    try:
        with scrubbed_buffer(options.length) as buffer:
            fill_password(buffer, options.alphabet)
            write_secret(buffer, sys.stdout)
    except EmptyAlphabetError as ex:
        logger.error(f"{ex}; enable at least one of lower, upper, number, symbol")
        return EXIT_EMPTY_ALPHABET
    except EntropySourceError as ex:
        logger.error(str(ex))
        return EXIT_ENTROPY_FAILURE
    except MemoryError:
        logger.error(f"Cannot allocate a {options.length}-character password")
        return EXIT_OUT_OF_MEMORY

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
