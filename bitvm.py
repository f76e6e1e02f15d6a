"""
Bit-level Brainfuck machine.

    +   Flip the bit under the cursor
    ,   Read one input bit into the cell (0 once input is exhausted)
    ;   Append the bit under the cursor to the output
    >   Move the cursor right
    <   Move the cursor left
    [   Jump past the matching ] if the bit under the cursor is 0
    ]   Jump back to the matching [ if the bit under the cursor is 1

All other characters are no-ops (they still count as a step).
"""
import sys

from bitstream import from_bit_stream, to_bit_stream

INITIAL_TAPE_SIZE = 1024
MAX_EXECUTION_STEPS = 10_000_000  # Prevent infinite loops


class BitVMError(Exception):
    pass


class UnmatchedBracketError(BitVMError):
    def __init__(self, bracket, position):
        self.bracket = bracket
        self.position = position
        super().__init__(f"Unmatched '{bracket}' at position {position}")


class ExecutionLimitError(BitVMError):
    def __init__(self, steps):
        self.steps = steps
        super().__init__("Execution stopped: possible infinite loop or too many instructions.")


def build_loop_map(code):
    """
    Build the jump map and validate square brackets.
    Each '[' maps to its ']' and back.
    """
    loop_stack = []
    loop_map = {}

    for i, c in enumerate(code):
        if c == '[':
            loop_stack.append(i)
        elif c == ']':
            if not loop_stack:
                raise UnmatchedBracketError(']', i)
            start = loop_stack.pop()
            loop_map[start] = i
            loop_map[i] = start

    if loop_stack:
        # Report the first unmatched '[' in program order
        raise UnmatchedBracketError('[', loop_stack[0])

    return loop_map


class Tape:
    """
    Bit memory that grows by a whole block whenever the cursor walks off
    either end. `cursor` is physical; `left_pad` is the physical index of
    logical position 0.
    """

    def __init__(self, block_size=INITIAL_TAPE_SIZE):
        self.block_size = block_size
        self.bits = bytearray(block_size)
        self.cursor = block_size // 2
        self.left_pad = block_size // 2

    @property
    def size(self):
        return len(self.bits)

    @property
    def position(self):
        return self.cursor - self.left_pad

    def read(self):
        return self.bits[self.cursor]

    def write(self, bit):
        self.bits[self.cursor] = 1 if bit else 0

    def flip(self):
        self.bits[self.cursor] ^= 1

    def move_right(self):
        grew = False
        if self.cursor + 1 >= len(self.bits):
            self.bits.extend(bytes(self.block_size))
            grew = True
        self.cursor += 1
        return grew

    def move_left(self):
        grew = False
        if self.cursor == 0:
            self.bits[0:0] = bytes(self.block_size)
            self.cursor += self.block_size
            self.left_pad += self.block_size
            grew = True
        self.cursor -= 1
        return grew

    def peek(self, position):
        """Bit at a logical position without moving; unmaterialized cells read 0."""
        phys = position + self.left_pad
        if 0 <= phys < len(self.bits):
            return self.bits[phys]
        return 0

    def window(self, radius):
        start = max(0, self.cursor - radius)
        end = min(len(self.bits), self.cursor + radius + 1)
        return start, list(self.bits[start:end])


class BitMachine:
    def __init__(self, code, input_bits=(), debug=False, out=None):
        self.code = code
        # Fails before any tape exists
        self.loop_map = build_loop_map(code)
        self.tape = Tape()
        self.pc = 0
        self.input_bits = list(input_bits)
        self.input_ptr = 0
        self.output_bits = []
        self.step_count = 0
        self.debug = debug
        self.out = out

        self.commands = {
            '+': self.flip,
            ',': self.read_input,
            ';': self.write_output,
            '>': self.move_right,
            '<': self.move_left,
            '[': self.jump_forward,
            ']': self.jump_backward,
        }

    @property
    def finished(self):
        return self.pc >= len(self.code)

    def log(self, message):
        if self.debug:
            print(message, file=self.out or sys.stdout)

    def flip(self):
        self.tape.flip()
        self.log(f"[+] Flip bit at {self.tape.cursor} -> {self.tape.read()}")

    def read_input(self):
        if self.input_ptr < len(self.input_bits):
            self.tape.write(self.input_bits[self.input_ptr])
            self.input_ptr += 1
        else:
            self.tape.write(0)
        self.log(f"[,] Read input bit -> {self.tape.read()}")

    def write_output(self):
        self.output_bits.append(self.tape.read())
        self.log(f"[;] Output bit -> {self.tape.read()}")

    def move_right(self):
        if self.tape.move_right():
            self.log(f"[>] Extended tape to {self.tape.size} bits")
        else:
            self.log(f"[>] Move right to {self.tape.cursor}")

    def move_left(self):
        if self.tape.move_left():
            self.log(f"[<] Extended tape to {self.tape.size} bits (left pad)")
        self.log(f"[<] Move left to {self.tape.cursor}")

    def jump_forward(self):
        if not self.tape.read():
            self.log(f"[[ Jump forward from {self.pc} to {self.loop_map[self.pc]}")
            self.pc = self.loop_map[self.pc]
        else:
            self.log(f"[[ Enter loop at {self.pc}")

    def jump_backward(self):
        if self.tape.read():
            self.log(f"]] Jump backward from {self.pc} to {self.loop_map[self.pc]}")
            self.pc = self.loop_map[self.pc]
        else:
            self.log(f"]] Exit loop at {self.pc}")

    def run_step(self):
        if self.finished:
            return False

        self.step_count += 1
        if self.step_count > MAX_EXECUTION_STEPS:
            raise ExecutionLimitError(self.step_count)

        command = self.commands.get(self.code[self.pc])
        if command is not None:
            command()

        # Jumps land on the partner bracket, so this moves past it
        self.pc += 1
        return True

    def run(self):
        while self.run_step():
            pass
        self.log(f"[MEM] Final memory used: {self.tape.size} bits")
        return self.output_bits


def load_program(path):
    # One character per byte, so positions and step counts are byte offsets
    with open(path, 'r', encoding='latin-1', newline='') as f:
        return f.read()


def interpret(code, input_bits=(), debug=False, out=None):
    return BitMachine(code, input_bits, debug=debug, out=out).run()


def run_program(code, data=b"", debug=False, out=None):
    output_bits = interpret(code, to_bit_stream(data), debug=debug, out=out)
    return from_bit_stream(output_bits)
