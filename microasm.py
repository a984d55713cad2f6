#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
MicroASM: Two-pass Micro-Assembler for Horizontal Microcode:
  - Accumulate symbolic field assignments into microcode lines, one field per prefix.
  - Track label declarations and branch references, resolve them to 4-bit forward offsets.
  - Pack every field value into its bit range of a fixed-width control word.
  - Emit a memory initialization image (MIF) and a Verilog header of field locations.

"""
version = "1.0.0"
# -------------------------------------------------
# python version : 3.12.8
# -------------------------------------------------

import io
import sys
import time
import argparse

import logging
from rich.console import Console, Group
from rich import box
from rich.table import Table
from rich.logging import RichHandler
from rich.panel import Panel
from rich.columns import Columns


# --------------------------------------------------
# reserved names (agreed with the instruction stream producer)
# --------------------------------------------------
BRANCH_PREFIX = "PROCEDURE_"    # field holding the relative branch offset
LABEL_MARKER = "label_"         # "label_<name>"  => label declaration
OFFSET_MARKER = "offset_"       # "offset_<name>" => branch to label
PC_LABEL_MARKER = "MICROPC_"    # labels exported to the Verilog header

MAX_BRANCH_DELTA = 15           # branch field is a 4-bit unsigned offset
DEFAULT_PC_WIDTH = 9
ADDRESS_COLUMN = 8

console = Console()
logger = logging.getLogger("rich")


# --------------------------------------------------
# Errors
# --------------------------------------------------
class AsmError(Exception):
    def __init__(self, message, name=None, line_index=None, lineno=None):
        self.name = name
        self.line_index = line_index
        self.lineno = lineno
        if line_index is not None:
            message = f"line {line_index}: {message}"
        if lineno is not None:
            message = f"{message} (source line {lineno})"
        super().__init__(message)

class NotInitializedError(AsmError):
    pass

class UnknownPrefixError(AsmError):
    pass

class DuplicateFieldError(AsmError):
    pass

class DuplicateLabelError(AsmError):
    pass

class UnresolvedLabelError(AsmError):
    pass

class LabelOutOfRangeError(AsmError):
    pass

class UnknownSymbolError(AsmError):
    pass

class ParseError(AsmError):
    pass

# --------------------------------------------------
# Field layout: prefix -> bit range
# --------------------------------------------------
class Field:
    def __init__(self, index, prefix, start, end):
        self.index = index        # stable position in the layout
        self.prefix = prefix      # ex) "OP_"
        self.start = start        # lowest bit (inclusive)
        self.end = end            # highest bit (inclusive)

    @property
    def width(self):
        return self.end - self.start + 1

    @property
    def short_name(self):
        name = self.prefix[:-1] if self.prefix.endswith("_") else self.prefix
        return name.lower()

    def __repr__(self):
        return f"Field({self.prefix!r}, [{self.start},{self.end}])"

class FieldLayout:
    """
    Closed set of field prefixes, each bound to a bit range of the control word.

    Fields are validated and numbered once here; lookups after that are dict hits.
    """
    def __init__(self, ranges, width=None):
        self.fields = []
        self.by_prefix = {}
        for prefix, (start, end) in ranges.items():
            if not prefix:
                raise ParseError("Empty field prefix.")
            if not prefix.isascii():
                raise ParseError(f"Field prefix '{prefix}' is not ASCII.", name=prefix)
            if start < 0 or end < start:
                raise ParseError(f"Field '{prefix}' has invalid range [{start},{end}].", name=prefix)
            field = Field(len(self.fields), prefix, start, end)
            self.fields.append(field)
            self.by_prefix[prefix] = field

        max_end = max((f.end for f in self.fields), default=-1)
        self.width = max_end + 1 if width is None else width
        if self.width <= max_end:
            raise ParseError(f"Line width {self.width} too small for bit {max_end}.")
        check_field_overlap(self.fields)

        branch = self.by_prefix.get(BRANCH_PREFIX)
        if branch is not None and (1 << branch.width) <= MAX_BRANCH_DELTA:
            logger.warning(f"Branch field '{BRANCH_PREFIX}' is only {branch.width} bits wide; offsets up to {MAX_BRANCH_DELTA} will be truncated.")

    def __len__(self):
        return len(self.fields)

    def __iter__(self):
        return iter(self.fields)

    def __contains__(self, prefix):
        return prefix in self.by_prefix

    def get(self, prefix):
        return self.by_prefix.get(prefix)

    def match_prefix(self, name):
        """
        find the field whose prefix starts the given name. the longest prefix wins.

        return: Field or None
        """
        best = None
        for field in self.fields:
            if name.startswith(field.prefix):
                if best is None or len(field.prefix) > len(best.prefix):
                    best = field
        return best

def check_field_overlap(fields):
    """
    Check for overlaps between field bit ranges.

    return: None if no overlap, raise ParseError if overlap.
    """
    sorted_fields = sorted(fields, key=lambda f: f.start)
    for f1, f2 in zip(sorted_fields, sorted_fields[1:]):
        if f2.start <= f1.end:
            raise ParseError(f"Field '{f1.prefix}' [{f1.start},{f1.end}] overlaps with '{f2.prefix}' [{f2.start},{f2.end}]", name=f2.prefix)

# --------------------------------------------------
# Symbol Table: symbolic field values
# --------------------------------------------------
class SymbolTable:
    def __init__(self, values=None):
        # value_map: { symbol_name: value (int) }
        self.value_map = {}
        for name, value in (values or {}).items():
            self.define_value(name, value)

    def define_value(self, name, value, lineno=None):
        old = self.value_map.get(name, None)
        if old is not None:
            if old != value:
                # error: redefined value
                raise ParseError(f"Value '{name}' redefined: old=0x{old:X}, new=0x{value:X}", name=name, lineno=lineno)
            logger.warning(f"Value '{name}' redefined with the same value 0x{value:X}. Ignoring.")
            return
        self.value_map[name] = value

    def get_value(self, name):
        return self.value_map.get(name, None)

    def __contains__(self, name):
        return name in self.value_map

    def __len__(self):
        return len(self.value_map)

# --------------------------------------------------
# Tokens and lines
# --------------------------------------------------
class TokenType:
    LITERAL = 0   # immediate value
    SYMBOL  = 1   # name looked up in the symbol table
    LABEL   = 2   # pending branch target

class Token:
    def __init__(self, t, value):
        self.type = t
        self.value = value

    @classmethod
    def literal(cls, value):
        return cls(TokenType.LITERAL, value)

    @classmethod
    def symbol(cls, name):
        return cls(TokenType.SYMBOL, name)

    @classmethod
    def label(cls, name):
        return cls(TokenType.LABEL, name)

    def __eq__(self, other):
        return isinstance(other, Token) and (self.type, self.value) == (other.type, other.value)

    def __repr__(self):
        return f"Token({self.type}, {self.value!r})"

    def __str__(self):
        if self.type == TokenType.LABEL:
            return f"@{self.value}"
        return str(self.value)

class Line:
    def __init__(self, index, lineno=None):
        self.index = index        # address of the line in the ROM
        self.lineno = lineno      # source line number (stream files only)
        self.values = {}          # { prefix: Token }
        self.branch_label = None  # label name before resolution

    def __len__(self):
        return len(self.values)

    def __repr__(self):
        fields = " ".join(f"{p}={t}" for p, t in self.values.items())
        return f"Line({self.index}: {fields})"

# --------------------------------------------------
# Assembler: line builder + label table
# --------------------------------------------------
class Assembler:
    """
    Assembly context for a single run.

    The stream producer calls entry() (or the explicit methods) once per field,
    then finalize() resolves labels and packs every line.
    """

    def __init__(self, layout=None, symbols=None, debug=False):
        self.layout = layout
        self.symbols = symbols if symbols is not None else SymbolTable()
        self.debug = debug
        self.lines = []
        self.labels = {}
        self.current_line = Line(0)
        self.source_lineno = None
        self.resolved = False

    def _check_initialized(self, what):
        if self.layout is None:
            raise NotInitializedError(f"{what}: field layout not initialized.")

    def error(self, cls, message, name=None):
        raise cls(message, name=name, line_index=len(self.lines), lineno=self.source_lineno)

    # producer interface
    def entry(self, newline, name):
        """
        one call of the instruction stream.
        - newline: end of the previous line
        - "label_<L>": label declaration
        - "offset_<L>": branch to label
        - anything else: symbolic value, field found by prefix
        """
        self._check_initialized("entry")
        if newline:
            self.end_line()

        if name.startswith(LABEL_MARKER):
            self.declare_label(name[len(LABEL_MARKER):])
        elif name.startswith(OFFSET_MARKER):
            self.reference_label(name[len(OFFSET_MARKER):])
        else:
            self.assign(name)

    def declare_label(self, label):
        self._check_initialized("declare_label")
        if self.resolved:
            self.error(AsmError, "Label declared after labels were resolved.", label)
        if not label:
            self.error(ParseError, "Empty label name.")
        if not label.isascii():
            self.error(ParseError, f"Label '{label}' is not ASCII.", label)
        if label in self.labels:
            self.error(DuplicateLabelError, f"Double label declaration: {label} (first at line {self.labels[label]})", label)
        self.labels[label] = len(self.lines)
        if self.debug:
            logger.debug(f"Label '{label}' => line {len(self.lines)}")

    def reference_label(self, label):
        self._check_initialized("reference_label")
        if not label:
            self.error(ParseError, "Empty branch target.")
        if not label.isascii():
            self.error(ParseError, f"Branch target '{label}' is not ASCII.", label)
        field = self.layout.get(BRANCH_PREFIX)
        if field is None:
            self.error(UnknownPrefixError, f"Branch to '{label}' but no '{BRANCH_PREFIX}' field in layout", BRANCH_PREFIX)
        self._put(field, Token.label(label))
        self.current_line.branch_label = label

    def assign(self, name):
        self._check_initialized("assign")
        field = self.layout.match_prefix(name)
        if field is None:
            self.error(UnknownPrefixError, f"Unknown prefix for name: {name}", name)
        self._put(field, Token.symbol(name))

    def assign_value(self, prefix, value):
        self._check_initialized("assign_value")
        field = self.layout.get(prefix)
        if field is None:
            self.error(UnknownPrefixError, f"Unknown prefix: {prefix}", prefix)
        if not isinstance(value, int):
            self.error(ParseError, f"Immediate for {prefix} must be an integer, got {value!r}", prefix)
        self._put(field, Token.literal(value))

    def _put(self, field, token):
        if self.resolved:
            self.error(AsmError, "Line builder used after labels were resolved.")
        # check for double prefix
        if field.prefix in self.current_line.values:
            self.error(DuplicateFieldError, f"Double prefix call: {field.prefix} (already {self.current_line.values[field.prefix]}, now {token})", field.prefix)
        if not self.current_line.values:
            self.current_line.lineno = self.source_lineno
        self.current_line.values[field.prefix] = token
        if self.debug:
            logger.debug(f"line {len(self.lines)}: {field.prefix} <= {token}")

    def end_line(self):
        """
        commit the pending line. an empty pending line is left as is.
        """
        self._check_initialized("end_line")
        if self.resolved:
            self.error(AsmError, "Line builder used after labels were resolved.")
        if not self.current_line.values:
            return
        self.lines.append(self.current_line)
        self.current_line = Line(len(self.lines))

    # second pass
    def finalize(self):
        """
        flush the last line, resolve labels and pack every line.

        return: RomImage
        """
        self._check_initialized("finalize")
        if self.resolved:
            raise AsmError("Labels already resolved, finalize() runs once per assembler.")
        self.end_line()
        resolve_labels(self.lines, self.labels)
        # tokens are rewritten in place, so even a failed pack leaves the builder closed
        self.resolved = True
        words = pack_lines(self.lines, self.layout, self.symbols)
        return RomImage(rom_depth(len(words)), self.layout.width, words)

    def pc_labels(self):
        """
        return: list of (label, line index) exported as program counter constants
        """
        return [(l, idx) for l, idx in self.labels.items() if l.startswith(PC_LABEL_MARKER)]

# --------------------------------------------------
# resolve_labels: label -> relative offset
# --------------------------------------------------
def resolve_labels(lines, labels):
    """
    Rewrite every branch reference into its forward distance from the line.

    return: number of rewritten references
    """
    resolved = 0
    for line in lines:
        token = line.values.get(BRANCH_PREFIX)
        if token is None or token.type != TokenType.LABEL:
            continue
        label = token.value
        if label not in labels:
            raise UnresolvedLabelError(f"Unresolved label: {label}", name=label, line_index=line.index, lineno=line.lineno)
        delta = labels[label] - line.index
        if delta < 0 or delta > MAX_BRANCH_DELTA:
            raise LabelOutOfRangeError(f"Label: {label} out of bounds: {delta} (target line {labels[label]})", name=label, line_index=line.index, lineno=line.lineno)
        line.values[BRANCH_PREFIX] = Token.literal(delta)
        line.branch_label = label
        resolved += 1
    return resolved

# --------------------------------------------------
# bit packing
# --------------------------------------------------
def fill_bit_part(bit_line, start, end, value):
    """
    write value into bit_line[start..end], LSB first. higher bits are dropped.
    """
    while start <= end:
        bit_line[start] = value & 1
        value >>= 1
        start += 1

def token_value(token, symbols, line, prefix):
    if token.type == TokenType.LITERAL:
        return token.value
    if token.type == TokenType.SYMBOL:
        value = symbols.get_value(token.value)
        if value is None:
            raise UnknownSymbolError(f"Unknown value: {token.value}", name=token.value, line_index=line.index, lineno=line.lineno)
        return value
    raise UnresolvedLabelError(f"Label '{token.value}' in field {prefix} was never resolved", name=token.value, line_index=line.index, lineno=line.lineno)

def pack_line(line, layout, symbols, bit_line):
    """
    pack a single line into bit_line (cleared first).

    return: bitstring (MSB first)
    """
    for i in range(len(bit_line)):
        bit_line[i] = 0
    for field in layout:
        token = line.values.get(field.prefix)
        if token is None:
            continue
        value = token_value(token, symbols, line, field.prefix)
        fill_bit_part(bit_line, field.start, field.end, value)
    return "".join(str(b) for b in reversed(bit_line))

def pack_lines(lines, layout, symbols):
    """
    return: list of bitstrings (MSB first), one per line
    """
    bit_line = [0] * layout.width
    return [pack_line(line, layout, symbols, bit_line) for line in lines]

# --------------------------------------------------
# ROM image
# --------------------------------------------------
def rom_depth(count):
    """
    return: smallest power of two >= count (at least 1)
    """
    depth = 1
    while depth < count:
        depth *= 2
    return depth

class RomImage:
    def __init__(self, depth, width, words):
        self.depth = depth
        self.width = width
        self.words = words

    def __len__(self):
        return len(self.words)

    @property
    def unique_words(self):
        return len(set(self.words))

def format_address(addr):
    return f"{addr}: ".rjust(ADDRESS_COLUMN)

def emit_image(image, out, fill=False):
    """
    Write the image in MIF text form to out.
    - fill: also write zero words for the addresses past the last line up to depth-1
    """
    out.write(f"DEPTH = {image.depth};\n")
    out.write(f"WIDTH = {image.width};\n")
    out.write("ADDRESS_RADIX = DEC;\n")
    out.write("DATA_RADIX = BIN;\n")
    out.write("CONTENT\n")
    out.write("BEGIN\n")
    for addr, bits in enumerate(image.words):
        out.write(f"{format_address(addr)}{bits};\n")
    if fill:
        zero = "0" * image.width
        for addr in range(len(image.words), image.depth):
            out.write(f"{format_address(addr)}{zero};\n")
    out.write("END;\n")

def emit_defines(assembler, out, pc_width=DEFAULT_PC_WIDTH):
    """
    Write Verilog defines for every field range and every MICROPC_ label.
    """
    if assembler.layout is None:
        raise NotInitializedError("No field layout set.")

    out.write("/*! \\file microcode_locations.v\n * \\brief Definitions of microcode locations.\n */\n")
    for field in assembler.layout:
        out.write(f"`define MICRO_DATA_{field.short_name} micro_data[{field.end}:{field.start}]\n")
    out.write("\n")
    for label, idx in assembler.pc_labels():
        out.write(f"`define {label} {pc_width}'d{idx}\n")

def emit_listing(assembler, image, out):
    """
    Write a human-readable listing: address | bits | fields <- labels
    """
    names_at = {}
    for label, idx in assembler.labels.items():
        names_at.setdefault(idx, []).append(label)

    for line, bits in zip(assembler.lines, image.words):
        fields = []
        for field in assembler.layout:
            token = line.values.get(field.prefix)
            if token is None:
                continue
            if field.prefix == BRANCH_PREFIX and line.branch_label is not None:
                fields.append(f"{field.prefix}={token}(@{line.branch_label})")
            else:
                fields.append(f"{field.prefix}={token}")
        line_str = f"{line.index:05x} | {bits} | {' '.join(fields)}"
        if line.index in names_at:
            line_str += f" <- label: {', '.join(names_at[line.index])}"
        out.write(line_str + "\n")

# --------------------------------------------------
# text inputs: layout file and stream file
# --------------------------------------------------
def parse_any_int(x):
    """
    parse a string to an integer. support 0b, 0x, or decimal.

    return : integer
    """
    x = x.strip().replace("_","")
    negative = x.startswith("-")
    if negative:
        x = x[1:]
    if x.lower().startswith("0b"):
        if len(x) == 2:
            raise ParseError("'0b' but no digits")
        value = int(x[2:], 2)
    elif x.lower().startswith("0x"):
        if len(x) == 2:
            raise ParseError("'0x' but no digits")
        value = int(x, 16)
    else:
        if x == "":
            raise ParseError("empty string for parse_any_int")
        value = int(x, 10)
    return -value if negative else value

def strip_comment(raw_line):
    line = raw_line.strip()
    if '//' in line:
        line = line.split('//')[0].rstrip()
    return line

def parse_layout(lines, verbose=False):
    """
    read layout directives and create the field layout and symbol table.
    - "#width 40"
    - "#field OP_ 0 2"
    - "#value OP_ADD 5"

    return: (FieldLayout, SymbolTable)
    """
    ranges = {}
    width = None
    symbols = SymbolTable()
    for idx, raw_line in enumerate(lines, 1):
        line = strip_comment(raw_line)
        if not line:
            continue
        parts = line.split()
        try:
            if parts[0] == "#field":
                if len(parts) != 4:
                    raise ParseError("Invalid field definition, expected '#field PREFIX start end'", lineno=idx)
                prefix = parts[1]
                if prefix in ranges:
                    raise ParseError(f"Field '{prefix}' redefined", name=prefix, lineno=idx)
                ranges[prefix] = (parse_any_int(parts[2]), parse_any_int(parts[3]))
            elif parts[0] == "#value":
                if len(parts) != 3:
                    raise ParseError("Invalid value definition, expected '#value NAME value'", lineno=idx)
                symbols.define_value(parts[1], parse_any_int(parts[2]), idx)
            elif parts[0] == "#width":
                if len(parts) != 2:
                    raise ParseError("Invalid width definition, expected '#width N'", lineno=idx)
                width = parse_any_int(parts[1])
            else:
                raise ParseError(f"Unknown directive '{parts[0]}'", name=parts[0], lineno=idx)
        except ValueError:
            raise ParseError(f"Invalid number in '{line}'", lineno=idx)

    layout = FieldLayout(ranges, width)
    if verbose:
        logger.info(f"Loaded {len(layout)} fields, {len(symbols)} values, width {layout.width}")
    return layout, symbols

def parse_stream(lines, assembler, verbose=False):
    """
    feed a stream file to the assembler. every text line is one microcode line:
    - "label_<L>", "offset_<L>", "<SYMBOL>" as for Assembler.entry()
    - "<PREFIX>=<value>" for an immediate value

    return: number of committed lines
    """
    for idx, raw_line in enumerate(lines, 1):
        line = strip_comment(raw_line)
        if not line:
            continue
        assembler.source_lineno = idx
        for tok in line.split():
            if "=" in tok:
                prefix, _, val = tok.partition("=")
                try:
                    value = parse_any_int(val)
                except ValueError:
                    raise ParseError(f"Invalid immediate '{tok}'", name=prefix, line_index=len(assembler.lines), lineno=idx)
                assembler.assign_value(prefix, value)
            else:
                assembler.entry(False, tok)
        assembler.end_line()
    assembler.source_lineno = None
    if verbose:
        logger.info(f"Read {len(assembler.lines)} microcode lines, {len(assembler.labels)} labels")
    return len(assembler.lines)

# --------------------------------------------------
# logging
# --------------------------------------------------
def setup_logging(output, log_file=False):
    """
    attach the rich console handler (once) and an optional log file next to output.

    return: the file handler (NullHandler if disabled)
    """
    logging.basicConfig(
        level=logging.DEBUG,
        format="    %(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True, markup=True)]
    )
    logger.setLevel(logging.DEBUG)

    LOG_FORMAT="%(asctime)s [%(levelname)s] %(message)s[%(filename)s:%(lineno)s]"
    log_file_handler = logging.FileHandler(f"{output}.log", mode="w", encoding="utf-8") if log_file else logging.NullHandler()
    log_file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(log_file_handler)
    return log_file_handler

def lines_table(assembler, image, title):
    table = Table(title=title, box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Addr", style="cyan", no_wrap=True)
    table.add_column("Fields", style="green")
    table.add_column("Bits", style="yellow")
    table.add_column("Source", style="magenta")
    for line in assembler.lines:
        fields = " ".join(f"{p}={t}" for p, t in line.values.items())
        bits = image.words[line.index] if image is not None else "-"
        table.add_row(str(line.index), fields, bits, str(line.lineno) if line.lineno else "-")
    return table

def labels_table(assembler):
    table = Table(title="Labels", box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Label", style="magenta", no_wrap=True)
    table.add_column("Line", style="yellow")
    for label, idx in assembler.labels.items():
        table.add_row(label, str(idx))
    return table

def fields_table(layout):
    table = Table(title="Fields", box=box.MINIMAL_DOUBLE_HEAD)
    table.add_column("Prefix", style="magenta", no_wrap=True)
    table.add_column("Range", style="yellow")
    table.add_column("Width", style="green")
    for field in layout:
        table.add_row(field.prefix, f"[{field.end}:{field.start}]", str(field.width))
    return table

# --------------------------------------------------
# main
# --------------------------------------------------
def build_parser():
    parser = argparse.ArgumentParser(description="MicroASM: Two-pass Micro-Assembler for Horizontal Microcode")
    parser.add_argument("-i","--input",required=True,
                        help="Instruction stream file path (one microcode line per text line).")
    parser.add_argument("-L","--layout",required=True,
                        help="Field layout file path (#width, #field, #value directives).")
    parser.add_argument("-o","--output",required=True,
                        help="Output MIF file path.")
    parser.add_argument("-D","--defines",default="microcode_locations.v",
                        help="Output Verilog defines file path. Default: microcode_locations.v")
    parser.add_argument("-r","--readable",action="store_true",
                        help="Generate a readable listing file with fields and labels.")
    parser.add_argument("--fill",action="store_true",
                        help="Write zero words for unused addresses up to DEPTH-1.")
    parser.add_argument("--pc-width",type=int,default=DEFAULT_PC_WIDTH,
                        help=f"Bit width of MICROPC_ label constants. Default: {DEFAULT_PC_WIDTH}")
    parser.add_argument("-v","--verbose",action="store_true",
                        help="Enable verbose output.")
    parser.add_argument("-l","--log",action="store_true",
                        help="Enable log file output.")
    parser.add_argument("-d","--debug",action="store_true",
                        help="Enable debugging mode.")
    return parser

def main(argv=None):
    start_time = time.time()

    # 0) Parse arguments
    args = build_parser().parse_args(argv)
    log_file_handler = setup_logging(args.output, args.log)
    try:
        return assemble_files(args, start_time)
    except AsmError as e:
        logger.error(f"{e}")
        raise
    finally:
        logger.removeHandler(log_file_handler)
        log_file_handler.close()

def assemble_files(args, start_time):
    # 1) Read layout
    try:
        with open(args.layout, "r", encoding="utf-8") as f:
            layout_lines = f.readlines()
    except FileNotFoundError:
        raise ParseError(f"Layout file '{args.layout}' not found.")
    logger.info(f"Loading layout => [bold magenta]{args.layout}[/bold magenta]")
    layout, symbols = parse_layout(layout_lines, verbose=args.verbose)

    # 2) Read instruction stream (first pass)
    try:
        with open(args.input, "r", encoding="utf-8") as f:
            stream_lines = f.readlines()
    except FileNotFoundError:
        raise ParseError(f"Input file '{args.input}' not found.")
    logger.info(f"Parsing input => [bold magenta]{args.input}[/bold magenta]")
    assembler = Assembler(layout, symbols, debug=args.debug)
    parse_stream(stream_lines, assembler, verbose=args.verbose)

    if args.debug:
        console.print(Panel.fit(lines_table(assembler, None, "Parsed Lines"), title="[bold green][DEBUG][/bold green] [bold white]Information[/bold white]", style="bold green"))

    # 3) Resolve labels and pack (second pass)
    if args.verbose:
        logger.info("Resolving labels and packing lines...")
    image = assembler.finalize()
    logger.info("Assembly complete.")

    # 4) Render every output, then write files
    mif_text = io.StringIO()
    emit_image(image, mif_text, fill=args.fill)
    defines_text = io.StringIO()
    emit_defines(assembler, defines_text, pc_width=args.pc_width)
    listing_text = io.StringIO()
    if args.readable:
        emit_listing(assembler, image, listing_text)

    logger.info("Emitting output files...")
    with open(args.output, "w", encoding="ascii", newline="\n") as f:
        f.write(mif_text.getvalue())
    if args.verbose:
        logger.info(f"Wrote MIF file => {args.output}, depth={image.depth}, width={image.width}")
    with open(args.defines, "w", encoding="ascii", newline="\n") as f:
        f.write(defines_text.getvalue())
    if args.verbose:
        logger.info(f"Wrote defines file => {args.defines}")
    outread = None
    if args.readable:
        outread = args.output + "_readable.txt"
        with open(outread, "w", encoding="utf-8") as f:
            f.write(listing_text.getvalue())
        if args.verbose:
            logger.info(f"Wrote readable text file => {outread}")

    finish_time = time.time()

    # 5) Final output
    if args.debug:
        debug_panel = Panel.fit(Columns([lines_table(assembler, image, "Packed Lines"), fields_table(layout), labels_table(assembler)]), title="[bold green][DEBUG][/bold green] [bold white]Information[/bold white]", style="bold green", padding=(4, 1))
        console.print(debug_panel)

    output_table = Table(title="[bold white]Output File:[/bold white]", title_justify="left", box=box.MINIMAL_DOUBLE_HEAD, show_lines=True)
    output_table.add_column("Type", style="white", no_wrap=True)
    output_table.add_column("File", style="magenta")
    output_table.add_row("ROM Image(MIF)", args.output)
    output_table.add_row("Verilog Defines", args.defines)
    if outread:
        output_table.add_row("Readable File(Text)", outread)

    summary = f"[bold white]Microcode Lines[/bold white]: [bold blue]{len(image)}[/bold blue] / DEPTH [bold blue]{image.depth}[/bold blue], WIDTH [bold blue]{image.width}[/bold blue]\n\n\
[bold white]Input File:[/bold white]\t[bold magenta]{args.input}[/bold magenta]"

    if args.verbose or args.debug:
        summary = f"[bold white]Elapsed Time: [/bold white]: [bold green]{finish_time-start_time:.4f}[/bold green] seconds\n\n\
[bold white]Microcode Lines[/bold white]: [bold blue]{len(image)}[/bold blue] / DEPTH [bold blue]{image.depth}[/bold blue], WIDTH [bold blue]{image.width}[/bold blue]\n\
[bold white]Unique Words:[/bold white] [bold green]{image.unique_words}[/bold green]\n\n\
[bold white]Total Fields:[/bold white] [bold green]{len(layout)}[/bold green]\n\
[bold white]Total Values:[/bold white] [bold green]{len(symbols)}[/bold green]\n\
[bold white]Total Labels:[/bold white] [bold green]{len(assembler.labels)}[/bold green] ({len(assembler.pc_labels())} exported)\n\n\
[bold white]Input File:[/bold white]\t[bold magenta]{args.input}[/bold magenta]\n\
[bold white]Layout File:[/bold white]\t[bold magenta]{args.layout}[/bold magenta]"

    panel = Panel.fit(Group(summary, output_table), title="[bold blue][INFO][/bold blue] Assembly Summary", subtitle=f"MicroASM v{version}", style="bold blue", padding=(2, 1))
    console.print("\n", panel)
    return image

def run(argv=None):
    try:
        main(argv)
    except AsmError as e:
        summary = f"[bold red]Assembly Failed with {type(e).__name__}[/bold red]\n\nCheck:\n[bold white]{e}[/bold white]"
        panel = Panel.fit(summary, title="Assembly Summary", subtitle=f"MicroASM v{version}", style="bold red", padding=(2, 1))
        console.print(panel)
        return 1
    except Exception as ex:
        logger.critical(f"{ex}")
        summary = f"[bold red]Assembly Failed with Exception[/bold red]\n\nCheck:\n[bold white]{ex}[/bold white]"
        panel = Panel.fit(summary, title="Assembly Summary", subtitle=f"MicroASM v{version}", style="bold red", padding=(2, 1))
        console.print(panel)
        return 1
    return 0

if __name__=="__main__":
    sys.exit(run())
