import argparse
import logging
import sys

from .Config import load_config
from .Core import StepKind
from .Memory import ABI_NAMES
from .Simulator import Simulator

# Example programs

# counts x3 down from 2 to 0
program_loop = '''
addi x3, x0, 2
loop: beq x3, x0, exit
addi x3, x3, -1
beq x0, x0, loop
exit: addi x0, x0, 0
'''

# stores 1..5 at addresses 0..16, then sums them into a0
program_array_sum = '''
addi x1, x0, 1
addi x2, x0, 0          # address
addi x3, x0, 6
fill: beq x1, x3, sum
sw x1, 0(x2)
addi x1, x1, 1
addi x2, x2, 4
beq x0, x0, fill
sum: addi x2, x0, 0
addi a0, x0, 0
addi x4, x0, 20
add_loop: beq x2, x4, done
lw x5, 0(x2)
add a0, a0, x5
addi x2, x2, 4
beq x0, x0, add_loop
done: beq x0, x0, done  # halt
'''

# bubble sort of 6 words starting at address 0
program_bubble_sort = '''
addi x5, x0, 324
sw x5, 0(x0)
addi x5, x0, 3
sw x5, 4(x0)
addi x5, x0, 9
sw x5, 8(x0)
addi x5, x0, 8
sw x5, 12(x0)
addi x5, x0, 1
sw x5, 16(x0)
addi x5, x0, 256
sw x5, 20(x0)

addi x3, x0, 0          # array base
addi x4, x0, 6          # n
addi x7, x0, 0          # i
outer_loop: addi x11, x4, -1
beq x7, x11, outer_exit
addi x10, x3, 0
addi x8, x0, 0
inner_loop: sub x12, x4, x7
addi x12, x12, -1
beq x8, x12, inner_exit
lw x5, 0(x10)
lw x6, 4(x10)
slt x11, x6, x5
beq x11, x0, no_swap
sw x5, 4(x10)
sw x6, 0(x10)
no_swap: addi x10, x10, 4
addi x8, x8, 1
beq x0, x0, inner_loop
inner_exit: addi x7, x7, 1
beq x0, x0, outer_loop
outer_exit: beq x0, x0, outer_exit
'''

EXAMPLES = {
    'loop': program_loop,
    'array_sum': program_array_sum,
    'bubble_sort': program_bubble_sort,
}


def print_trace(event):
    inst = event.instruction
    if event.outcome.kind is StepKind.HALTED:
        print(f"halted at PC={event.pc_after}")
    elif event.outcome.kind is StepKind.ERROR:
        print(f"error at PC={event.pc_before}: {event.outcome.message}")
    else:
        print(f"PC={event.pc_before:<4} {inst.text:<32} -> PC={event.pc_after}")


def print_registers(registers):
    for row in range(0, 32, 4):
        print("  ".join(f"x{i:<2} ({ABI_NAMES[i]:>4}) = {registers[i]:>11}"
                        for i in range(row, row + 4)))


def main(program, config_path=None, delay=None, max_steps=None, trace=False):
    """
    Assemble and run ``program``, printing the final machine state.

    Returns the Simulator, or None if the program does not assemble.
    """
    sim = Simulator(config_path=config_path)
    if max_steps is None:
        max_steps = sim.config['run']['max_steps']

    result = sim.load(program)
    if not result.ok:
        print(f"Error: {result.error}", file=sys.stderr)
        return None

    print(f"{result.instruction_count} instructions loaded")
    if trace:
        sim.subscribe(print_trace)

    run = sim.run(delay=delay, max_steps=max_steps)

    print("\n=== Simulation Results ===")
    if run.outcome is not None and run.outcome.kind is StepKind.ERROR:
        print(f"Stopped by error: {run.outcome.message}")
    elif not run.halted:
        print(f"Stopped after {run.steps} steps without halting")
    print(f"Instructions executed: {run.steps}")
    print(f"PC: {sim.current_pc()}")
    print("\nRegisters:")
    print_registers(sim.inspect_registers())

    words = sim.config['memory']['display_words']
    print("\nMemory:")
    for addr, value in sim.inspect_memory(0, words * 4).items():
        print(f"  [{addr:>3}] {value}")

    return sim


def cli(argv=None):
    parser = argparse.ArgumentParser(description="Single-cycle RISC-V simulator")
    parser.add_argument('program', nargs='?', help="assembly source file")
    parser.add_argument('--example', choices=sorted(EXAMPLES), help="run a built-in example program")
    parser.add_argument('--config', help="path to a YAML config file")
    parser.add_argument('--delay', type=int, help="milliseconds between steps")
    parser.add_argument('--max-steps', type=int, help="stop after this many steps")
    parser.add_argument('--trace', action='store_true', help="print every executed instruction")
    parser.add_argument('--plot', action='store_true', help="plot registers and memory when done")
    parser.add_argument('--serve', action='store_true', help="start the web API instead of running")
    args = parser.parse_args(argv)

    if args.program:
        with open(args.program, 'r') as f:
            program = f.read()
    elif args.example:
        program = EXAMPLES[args.example]
    elif not args.serve:
        parser.error("give a program file or --example")

    config = load_config(args.config)
    level = 'DEBUG' if args.trace else config['logging']['level']
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    if args.serve:
        from .app import create_app

        sim = Simulator(config_path=args.config)
        if args.program or args.example:
            sim.load(program)
        server = config['server']
        create_app(sim).run(host=server['host'], port=server['port'])
        return 0

    delay = args.delay / 1000 if args.delay is not None else None
    sim = main(program, config_path=args.config, delay=delay,
               max_steps=args.max_steps, trace=args.trace)
    if sim is None:
        return 1

    if args.plot:
        from .Display import show
        show(sim, sim.config['memory']['display_words'])
    return 0


if __name__ == "__main__":
    sys.exit(cli())
