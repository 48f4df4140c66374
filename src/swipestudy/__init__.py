"""swipestudy: spaced-repetition study sessions over folders of cards."""

from swipestudy.consts import VERSION

__version__ = VERSION
