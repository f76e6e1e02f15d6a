#!/usr/bin/env python3
import os
import sys

from bitvm import BitMachine, BitVMError, load_program
from bitstream import bits_to_str, to_bit_stream

class Colors:
    HEADER = '\033[95m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GREEN = '\033[92m'
    WARNING = '\033[93m'
    FAIL = '\033[91m'
    ENDC = '\033[0m'
    BOLD = '\033[1m'
    REVERSE = '\033[7m'

class Debugger:
    def __init__(self, code, input_data=b""):
        self.code = code
        self.machine = BitMachine(code, to_bit_stream(input_data))
        self.breakpoints = set()

    @property
    def pc(self):
        return self.machine.pc

    def run_step(self):
        return self.machine.run_step()

    def continue_run(self):
        """
        Run until the program ends or the PC lands on a breakpoint.
        Returns the breakpoint PC, or None if the program finished.
        """
        while self.run_step():
            if self.pc in self.breakpoints:
                return self.pc
        return None

    def toggle_breakpoint(self, pc):
        if pc in self.breakpoints:
            self.breakpoints.remove(pc)
            return False
        self.breakpoints.add(pc)
        return True

    def dump_memory(self, start, count):
        """
        Bits at logical positions [start, start + count).
        Positions that were never materialized read as 0.
        """
        tape = self.machine.tape
        return [(pos, tape.peek(pos)) for pos in range(start, start + count)]

    def print_state(self):
        m = self.machine
        tape = m.tape
        print(f"\n{Colors.BOLD}--- Step {m.step_count} ---{Colors.ENDC}")
        print(f"PC: {m.pc} / {len(self.code)}")
        print(f"Cursor: {tape.cursor} (logical {tape.position}), tape {tape.size} bits")

        # Tape window around cursor
        start, bits = tape.window(16)
        tape_str = ""
        for i, bit in enumerate(bits):
            if start + i == tape.cursor:
                tape_str += f"{Colors.REVERSE}{bit}{Colors.ENDC}"
            else:
                tape_str += str(bit)
        print(f"Loc: {tape_str}")

        # Code visualization
        context_window = 2
        start_op = max(0, m.pc - context_window)
        end_op = min(len(self.code), m.pc + context_window + 1)
        for i in range(start_op, end_op):
            op_str = repr(self.code[i])
            if i in m.loop_map:
                op_str += f" (target: {m.loop_map[i]})"
            if i == m.pc:
                print(f"{Colors.GREEN}-> {i:04}: {op_str}{Colors.ENDC}")
            else:
                print(f"   {i:04}: {op_str}")

        if m.output_bits:
            print(f"{Colors.CYAN}Out: {bits_to_str(m.output_bits)}{Colors.ENDC}")

    def run(self):
        print("Bit debugger started. Commands: (s)tep, (c)ontinue, (q)uit, (m)em dump, (b)reakpoint, enter to repeat last")
        last_cmd = 's'
        try:
            while not self.machine.finished:
                self.print_state()
                try:
                    cmd = input(f"{Colors.BLUE}(bit-dbg){Colors.ENDC} ").strip()
                except EOFError:
                    break

                if cmd == '':
                    cmd = last_cmd
                last_cmd = cmd

                if cmd.startswith('s'):
                    self.run_step()
                elif cmd.startswith('c'):
                    hit = self.continue_run()
                    if hit is not None:
                        print(f"Breakpoint hit at {hit}")
                elif cmd.startswith('q'):
                    break
                elif cmd.startswith('m'):
                    try:
                        parts = cmd.split()
                        addr = int(parts[1]) if len(parts) > 1 else self.machine.tape.position
                        count = int(parts[2]) if len(parts) > 2 else 20
                    except ValueError:
                        print("Usage: m [pos] [count]")
                        continue
                    print("Memory Dump:")
                    for pos, bit in self.dump_memory(addr, count):
                        print(f"[{pos:+05}]: {bit}")
                elif cmd.startswith('b'):
                    try:
                        bp = int(cmd.split()[1])
                    except (IndexError, ValueError):
                        print("Usage: b <pc>")
                        continue
                    if self.toggle_breakpoint(bp):
                        print(f"Breakpoint set at {bp}")
                    else:
                        print(f"Breakpoint removed at {bp}")
        except BitVMError as e:
            print(f"{Colors.FAIL}{e}{Colors.ENDC}")
            return False

        print(f"Execution finished. Output: {bits_to_str(self.machine.output_bits)}")
        return True

if __name__ == '__main__':
    if len(sys.argv) < 2:
        print("Usage: ./debugger.py <program_file> [input_string]")
        sys.exit(1)

    try:
        code = load_program(sys.argv[1])
    except OSError:
        print(f"Failed to open program file: {sys.argv[1]}", file=sys.stderr)
        sys.exit(1)
    input_data = os.fsencode(sys.argv[2]) if len(sys.argv) > 2 else b""

    try:
        dbg = Debugger(code, input_data)
    except BitVMError as e:
        print(f"{Colors.FAIL}{e}{Colors.ENDC}")
        sys.exit(1)
    sys.exit(0 if dbg.run() else 1)
