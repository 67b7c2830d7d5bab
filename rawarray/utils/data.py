"""
    Dataset utilities for PyTorch.

    This file is part of RawArray.

    RawArray is free software: you can redistribute it and/or modify
    it under the terms of the GNU General Public License as published by
    the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    RawArray is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
    GNU General Public License for more details.

    You should have received a copy of the GNU General Public License
    along with RawArray.  If not, see <https://www.gnu.org/licenses/>.
"""
from typing import Callable, List, Optional
from torch.utils.data.dataset import Dataset
from numpy import ndarray
from .. import load


class RawArrayDataset(Dataset):
    """
    Represent a PyTorch Dataset reading one RawArray file per item.
    """
    def __init__(self, file_paths: List[str], process_func: Optional[Callable] = None, order: str = 'F'):
        """
        Create a new `Dataset` object.
        :param file_paths: list of paths to the RawArray files
        :param process_func: function applied to each array after loading
        :param order: "F" to keep the file dimensions, "C" for the reversed, C-contiguous dimensions
        """
        self.file_paths = list(file_paths)
        self.process_func = process_func
        self.order = order

    def __getitem__(self, item: int) -> ndarray:
        """
        Load the array at the specified index
        :param item: index of the item
        :return: array
        """
        # files are opened on demand, so workers never share a handle
        array = load(self.file_paths[item], order=self.order).copy()

        return self.process_func(array) if self.process_func is not None else array

    def __len__(self) -> int:
        """
        Returns the length of the dataset.
        :return: length of the dataset
        """
        return len(self.file_paths)
