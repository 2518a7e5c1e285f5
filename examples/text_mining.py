"""A text-mining graph whose expensive branches run in the background.

Reading a single key lazily only computes what that key needs:

    nodeflow run examples/text_mining.py --lazy --key word_bigrams
"""

import re
import time

import nodeflow as nf


def ngrams(n, xs):
    return [tuple(xs[i : i + n]) for i in range(len(xs) - n + 1)]


@nf.node
def text():
    return "The fox jumped over the lazy dog.\nHere come the boogie man!"


@nf.pnode
def sentences(text):
    return [s for s in re.split(r"[.!?]\s?", text) if s]


@nf.pnode
def sentence_tokens(sentences):
    return [s.split(" ") for s in sentences]


@nf.node
def tokens(sentence_tokens):
    return [token for sentence in sentence_tokens for token in sentence]


@nf.pnode
def names(sentence_tokens):
    time.sleep(2.0)
    return ["fox", "dog", "man"]


@nf.pnode
def sentiments(sentence_tokens):
    time.sleep(1.2)
    return ["fear"]


graph = nf.build_graph_spec(
    {
        "text": text,
        "sentences": sentences,
        "sentence_tokens": sentence_tokens,
        "tokens": tokens,
        "word_bigrams": nf.pnode(lambda tokens: ngrams(2, tokens)),
        "word_trigrams": nf.pnode(lambda tokens: ngrams(3, tokens)),
        "char_bigrams": nf.pnode(lambda tokens: [ngrams(2, t) for t in tokens]),
        "char_trigrams": nf.pnode(lambda tokens: [ngrams(3, t) for t in tokens]),
        "names": names,
        "sentiments": sentiments,
    },
)
