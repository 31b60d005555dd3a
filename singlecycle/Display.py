import matplotlib.pyplot as plt
import numpy as np

from .Memory import ABI_NAMES


def register_figure(registers, highlight=None):
    """Heat map of the 32 registers, 4 rows of 8, annotated with values."""
    data = np.array(registers, dtype=np.int64).reshape(4, 8)

    fig, ax = plt.subplots(figsize=(16, 6))
    ax.imshow(data, cmap="Blues", aspect='auto')
    for i in range(4):
        for j in range(8):
            index = i * 8 + j
            weight = 'bold' if index == highlight else 'normal'
            ax.text(j, i, f"x{index} ({ABI_NAMES[index]})\n{data[i, j]}",
                    ha='center', va='center', color='black', fontweight=weight)
    ax.set_title("Register File")
    ax.axis('off')
    return fig


def memory_figure(memory, highlight=None):
    """Bar chart of a {address: value} memory window."""
    addresses = np.array(sorted(memory), dtype=np.int64)
    values = np.array([memory[a] for a in addresses], dtype=np.int64)

    fig, ax = plt.subplots(figsize=(16, 4))
    colors = ['tab:orange' if a == highlight else 'tab:blue' for a in addresses]
    ax.bar(np.arange(len(addresses)), values, color=colors)
    ax.set_xticks(np.arange(len(addresses)))
    ax.set_xticklabels([f"[{a}]" for a in addresses])
    ax.set_title("Data Memory")
    ax.set_ylabel("value")
    return fig


def show(simulator, words=16):
    register_figure(simulator.inspect_registers())
    memory_figure(simulator.inspect_memory(0, words * 4))
    plt.show()
