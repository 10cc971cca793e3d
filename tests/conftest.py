'''Shared fixtures: palettes and small GIF streams built in memory.'''

import random

import pytest

import gifbuilder

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)


@pytest.fixture
def mono_palette():
    return [WHITE, BLACK]


@pytest.fixture
def rgbw_palette():
    return [RED, GREEN, BLUE, WHITE]


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def two_by_two_gif():
    '''Single 2x2 frame, [white, black, black, white], no control extension.'''
    return (
        b"GIF89a"
        + b"\x02\x00\x02\x00\x80\x00\x00"
        + b"\xff\xff\xff\x00\x00\x00"
        + b"\x2c\x00\x00\x00\x00\x02\x00\x02\x00\x00"
        + b"\x02\x03\x44\x02\x05\x00"
        + b"\x3b"
    )


@pytest.fixture
def animation(rgbw_palette):
    '''Three 4x4 frames, each a solid color, 50ms apart.'''
    blocks = []
    for i in range(3):
        blocks.append(gifbuilder.graphic_control(delay=5))
        blocks.append(gifbuilder.image([i] * 16, 4, 4))
    return gifbuilder.build_gif(4, 4, *blocks, gct=rgbw_palette)
