import matplotlib.pyplot as plt

from singlecycle.Display import memory_figure, register_figure


def test_register_figure(run_program):
    sim = run_program("addi x1, x0, 5\naddi t6, x0, -3")
    fig = register_figure(sim.inspect_registers(), highlight=31)
    ax = fig.axes[0]
    labels = [text.get_text() for text in ax.texts]
    assert len(labels) == 32
    assert labels[1] == "x1 (ra)\n5"
    assert labels[31] == "x31 (t6)\n-3"
    plt.close(fig)


def test_memory_figure(run_program):
    sim = run_program("addi x1, x0, 7\nsw x1, 4(x0)")
    fig = memory_figure(sim.inspect_memory(0, 16), highlight=4)
    ax = fig.axes[0]
    heights = [bar.get_height() for bar in ax.patches]
    assert heights == [0, 7, 0, 0]
    assert [t.get_text() for t in ax.get_xticklabels()] == ["[0]", "[4]", "[8]", "[12]"]
    plt.close(fig)
