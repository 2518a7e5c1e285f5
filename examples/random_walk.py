"""A side-effecting graph driven by `compute_while`.

The initial node is a producer drawing a new step on every run; the graph
records the walk until it has taken enough steps.
"""

import random

import nodeflow as nf

rng = random.Random(7)
positions = [0]


def step():
    return rng.choice((-1, 1))


def position(step):
    positions.append(positions[-1] + step)
    return positions[-1]


graph = nf.build_graph_spec({"step": step, "position": position})

if __name__ == "__main__":
    nf.compute_while(lambda: len(positions) <= 20, graph)
    print(positions)
