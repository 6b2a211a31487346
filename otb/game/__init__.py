"""Game components and systems: character, input, boxes, box attachment and world setup."""