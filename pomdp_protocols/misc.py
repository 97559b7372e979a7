"""miscellaneous functions"""

import logging
import weakref
from enum import Enum
from typing import Iterator, List, Union

import numpy as np


class LogLevel(Enum):
    """log levels"""

    V0 = 1000  # NO messages
    V1 = 30  # print results and setup
    V2 = 20  # print simulation runs
    V3 = 15  # print run level things (beliefs, scratch allocation)
    V4 = 10  # print time steps
    V5 = 5  # hardcore debugging

    @staticmethod
    def create(level: int) -> "LogLevel":
        """creates a loglevel from its verbosity

        Args:
             level: (`int`): in [0 ... 5]

        RETURNS (`LogLevel`):

        """
        return LogLevel["V" + str(level)]


class POMDPLogger:
    """logger, inherit in order to use logging function with self.log()"""

    _level = LogLevel.V0
    # tracks loggers only as long as they are alive
    registered_loggers: "weakref.WeakSet[POMDPLogger]" = weakref.WeakSet()

    @classmethod
    def set_level(cls, level: LogLevel):
        """sets level of the loggers

        Anything that is logged with a **lower** level will be displayed

        Args:
             level: (`LogLevel`):

        """

        for logger in cls.registered_loggers:
            logger.logger.setLevel(level.value)

        cls._level = level

    def __init__(self, name: str = ""):
        """creates a logger"""

        if not name:
            name = self.__class__.__name__

        self.logger = logging.getLogger(f"pomdp_protocols.{name}")
        self.logger.setLevel(POMDPLogger._level.value)

        if not self.logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("[%(asctime)s] %(message)s", "%H:%M"))
            self.logger.addHandler(handler)
            self.logger.propagate = False

        self._enabled = True

        POMDPLogger.registered_loggers.add(self)

    def log(self, lvl: LogLevel, msg: str):
        """logs message"""

        if self._enabled:
            self.logger.log(lvl.value, lvl.name + ": " + msg)

    def disable_logging(self):
        """disable logger"""
        self._enabled = False

    @classmethod
    def log_is_on(cls, lvl: LogLevel) -> bool:
        """returns whether logging is on for given level

        Args:
             lvl: (`LogLevel`): level to check

        RETURNS (`bool`): True if messages with this log level would be printed

        """

        return lvl.value >= cls._level.value


class DiscreteSpace:
    """DiscreteSpace discrete uninterupted space of some shape

    Enumerable, so it can be handed out as the state, action or observation
    space of a model: iterating yields every element as an array.
    """

    def __init__(self, size: Union[List[int], np.ndarray]):
        """initiates a discrete space of size size

        Args:
             size: (`Union[List[int], np.ndarray]`): is a list of dimension ranges

        """

        self.size = np.array(size).astype(int)
        self.num_elements: int = int(np.prod(self.size))
        self._indexing_steps = np.array(
            [np.prod(self.size[:i]) for i in range(len(self.size))]
        ).astype(int)
        self.ndim = len(self.size)

    @property
    def n(self) -> int:
        """Number of elements in space

        RETURNS (`int`):

        """
        return self.num_elements

    def contains(self, elem: np.ndarray) -> bool:
        """returns whether `self` contains ``elem``

        Args:
             elem: (`np.ndarray`): element to check against

        RETURNS (`bool`):

        """

        elem = np.asarray(elem)
        return bool(
            elem.shape == (self.ndim,)
            and (elem >= 0).all()
            and (elem < self.size).all()
        )

    def sample(self, rng: np.random.Generator) -> np.ndarray:
        """returns a sample from the space at random

        Args:
             rng: (`np.random.Generator`): source of randomness

        RETURNS (`np.array`): a sample in the space of this

        """
        return (rng.random(self.ndim) * self.size).astype(int)

    def index_of(self, elem: np.ndarray) -> int:
        """returns the index of an element (projects to single dimension)

        See :meth:`from_index` for the reverse operation.

        Args:
             elem: (`np.ndarray`): the element to project

        RETURNS (`int`): projection

        """
        assert self.contains(elem), f"{elem} not in {self}"

        # faster than manual sum/list comprehension or `np.ravel_multi_index`
        return int(np.dot(elem, self._indexing_steps))

    def from_index(self, idx: int) -> np.ndarray:
        """returns the element associated with index ``i``

        See :meth:`index_of` for the reverse operation.

        :param i: the index of the element to be returned
        :returns: an element in this space associated with ``i``
        """
        assert 0 <= idx < self.num_elements, f"{idx} not in {self}"

        return np.array(np.unravel_index(idx, self.size, order="F"))

    def __iter__(self) -> Iterator[np.ndarray]:
        return (self.from_index(i) for i in range(self.num_elements))

    def __len__(self) -> int:
        return self.num_elements

    def __repr__(self):
        return f"DiscreteSpace of size {self.size}"
