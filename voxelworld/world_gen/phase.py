import abc
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from voxelworld.world_gen.core import MapChunk, MapgenMap

_T = TypeVar('_T')


class AbstractPhase(abc.ABC):
    generator: 'MapgenMap'

    def __init__(self, generator: 'MapgenMap') -> None:
        self.generator = generator

    @abc.abstractmethod
    def generate_chunk(self, chunk: 'MapChunk') -> None:
        raise NotImplementedError


class ColumnCachedPhase(AbstractPhase, Generic[_T]):
    """
    A phase whose noise only depends on the horizontal position. Results are
    computed once per chunk column and shared by every chunk stacked on it.
    """
    columns: dict[tuple[int, int], _T]

    def __init__(self, generator: 'MapgenMap') -> None:
        super().__init__(generator)
        self.columns = {}

    @abc.abstractmethod
    def _get_column(self, x: int, y: int) -> _T:
        raise NotImplementedError

    def get_column(self, x: int, y: int) -> _T:
        column = self.columns.get((x, y))
        if column is None:
            column = self._get_column(x, y)
            self.columns[(x, y)] = column
        return column
