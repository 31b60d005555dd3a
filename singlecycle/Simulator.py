import logging
import time
from typing import NamedTuple, Optional

from .Assembler import Assembler, ParseError
from .Config import load_config
from .Core import Core, ExecutionError, StepEvent, StepKind, StepOutcome

logger = logging.getLogger(__name__)


class LoadResult(NamedTuple):
    instruction_count: int = 0
    error: Optional[ParseError] = None

    @property
    def ok(self):
        return self.error is None


class RunResult(NamedTuple):
    steps: int
    outcome: Optional[StepOutcome]
    halted: bool
    cancelled: bool = False


class Simulator:
    """Owns one core and the loaded program.

    Errors from the assembler and the core are turned into LoadResult and
    StepOutcome values here, so callers never have to catch them.
    """

    def __init__(self, config_path=None, memory_size=None):
        self.config = load_config(config_path)
        if memory_size is None:
            memory_size = self.config['memory']['size']

        self.core = Core(memory_size)
        self.labels = {}
        self.running = False
        self.listeners = []

    # --- Program loading ---

    def load(self, source):
        try:
            instructions, labels = Assembler().assemble(source)
        except ParseError as e:
            logger.warning("assembly failed: %s", e)
            return LoadResult(error=e)

        self.running = False
        self.core.load(instructions)
        self.labels = labels
        logger.info("%d instruction(s) loaded", len(instructions))
        return LoadResult(len(instructions))

    @property
    def instructions(self):
        return tuple(self.core.instructions)

    @property
    def state(self):
        return self.core.state

    # --- Execution ---

    def step(self):
        pc = self.core.pc
        try:
            event = self.core.step()
        except ExecutionError as e:
            logger.warning("execution error at PC=%d: %s", pc, e.message)
            self.running = False
            index = e.instruction.index if e.instruction is not None else None
            event = StepEvent(StepOutcome.error(e.message, index), pc, self.core.pc, e.instruction)

        self.notify(event)
        return event.outcome

    def run(self, cancel=None, delay=None, max_steps=None):
        """Step until the program halts, errors or is cancelled.

        ``cancel`` is anything with ``is_set()`` (e.g. threading.Event);
        ``stop()`` has the same effect. ``delay`` is in seconds and defaults
        to ``run.delay_ms`` from the config.
        """
        if delay is None:
            delay = self.config['run']['delay_ms'] / 1000

        self.running = True
        steps = 0
        outcome = None
        cancelled = False
        try:
            while True:
                if not self.running or (cancel is not None and cancel.is_set()):
                    cancelled = True
                    break
                if max_steps is not None and steps >= max_steps:
                    logger.info("stopped after %d steps", steps)
                    break

                outcome = self.step()
                if outcome.kind is not StepKind.EXECUTED:
                    break
                steps += 1
                if self.core.is_halted():
                    break
                if delay:
                    time.sleep(delay)
        finally:
            self.running = False

        return RunResult(steps, outcome, self.core.is_halted(), cancelled)

    def stop(self):
        self.running = False

    def reset(self):
        self.running = False
        self.core.reset()
        logger.info("simulator reset")

    # --- Step listeners ---

    def subscribe(self, listener):
        self.listeners.append(listener)

    def unsubscribe(self, listener):
        self.listeners.remove(listener)

    def notify(self, event):
        for listener in list(self.listeners):
            listener(event)

    # --- Inspection ---

    def inspect_registers(self):
        return self.core.registers.snapshot()

    def inspect_memory(self, start=0, stop=None):
        return self.core.memory.words(start, stop)

    def current_pc(self):
        return self.core.pc

    def is_halted(self):
        return self.core.is_halted()
