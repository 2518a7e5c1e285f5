"""Summary statistics of a sample, with the two expensive moments in parallel.

Run with:

    nodeflow run examples/stats.py
    nodeflow run examples/stats.py --set 'xs=[1, 2, 3, 4]' --key sd
"""

import math
import time

import nodeflow as nf


def slow_mean(xs, n):
    time.sleep(0.2)
    return sum(xs) / n


def slow_mean_of_squares(xs, n):
    time.sleep(0.2)
    return sum(x * x for x in xs) / n


graph = nf.build_graph_spec(
    {
        # Initial value; can be replaced at run time with --set xs=[...]
        "xs": lambda: list(range(100)),
        "n": lambda xs: len(xs),
        "m": nf.pnode(slow_mean),
        "m2": nf.pnode(slow_mean_of_squares),
        "v": lambda m, m2: m2 - m * m,
        "sd": lambda v: math.sqrt(v),
    },
)

if __name__ == "__main__":
    print(nf.compute_now(graph))
