# Copyright 2024, m3shware
#
# Permission is hereby granted, free of charge, to any person obtaining a
# copy of this software and associated documentation files (the "Software"),
# to deal in the Software without restriction, including without limitation
# the rights to use, copy, modify, merge, publish, distribute, sublicense,
# and/or sell copies of the Software, and to permit persons to whom the
# Software is furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING
# FROM, OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

""" OBJ file I/O.

Low-level functions to read and write the geometry subset of the OBJ
format: vertex positions ('v' lines) and polygonal faces ('f' lines).
Texture coordinates and normals referenced by face statements are
skipped on input and never written.
"""

import numpy as np


def _array_append(array, item):
    """ Resize and append to array.

    Parameters
    ----------
    array : ~numpy.ndarray or None
        Array object to be augmented. A new array of shape
        ``(1, *item.shape)`` will be created if :obj:`None`.
    item : array_like
        Item to be added as new element of the first axis. The
        shapes ``array.shape[1:]`` and ``item.shape`` have to agree.

    Raises
    ------
    ValueError
        In case of dimension mismatch.

    Returns
    -------
    ~numpy.ndarray
        Reference to the enlarged array. This is a new array if the
        input array argument was :obj:`None`.
    """
    if array is None:
        return np.array([item], dtype=float)

    if array.shape[1:] != np.shape(item):
        raise ValueError(f'cannot add item with shape {np.shape(item)}')

    shape = list(array.shape)
    shape[0] += 1

    array.resize(shape, refcheck=False)
    array[-1, ...] = item

    return array


def _vertex_index(block, count):
    """ Vertex index of a face statement entry.

    Parameters
    ----------
    block : str
        A v, v/vt, v//vn, or v/vt/vn string.
    count : int
        Number of vertices read so far. Needed to resolve negative
        (relative) indices.

    Raises
    ------
    ValueError
        If the string could not be parsed.

    Returns
    -------
    int
        Vertex index, 0-based.
    """
    bits = block.split('/')

    if len(bits) > 3 or not bits[0]:
        raise ValueError(f'invalid vertex definition: {block}')

    # Only the leading v part is of interest. Conversion will raise
    # ValueError for anything but an integer.
    v = int(bits[0])

    if v == 0:
        raise ValueError('vertex index 0 is undefined')

    return count + v if v < 0 else v - 1


def read(filename, *args):
    """ Read from file.

    Assumes an OBJ-like file structure, i.e., a text file where each
    line starts with a tag. Lines whose tag is contained in `args` are
    read. Data blocks are returned in the same order as given in `args`.
    If no corresponding data is found in the file the requested data
    block is represented as :obj:`None`.

    Parameters
    ----------
    filename : str
        Name of an OBJ file.
    *args
        Variable number of arguments of type :class:`str`.

    Raises
    ------
    ValueError
        If any argument is not of type :class:`str` or a line cannot be
        parsed.

    Returns
    -------
    object or tuple(object, ...)
        Data blocks corresponding to line tags given in `args`.


    To read vertices and faces from an OBJ file do

    >>> v, f = read('input-file.obj', 'v', 'f')

    Data blocks are returned as objects of type :class:`~numpy.ndarray`,
    the exception being the 'f' tag returning ``list[list[int]]`` with
    0-based vertex indices. Comments and unknown tags are ignored.
    """
    if not args:
        return None

    if any((not isinstance(arg, str) for arg in args)):
        raise ValueError("arguments have to be of type 'str'")

    blocks = {arg: [] if arg == 'f' else None for arg in args}

    # The number of encountered vertex coordinates.
    count = 0

    with open(filename, 'r') as file:
        for lineno, line in enumerate(file, start=1):
            tokens = line.split()

            if not tokens or tokens[0].startswith('#'):
                continue

            tag = tokens[0]

            try:
                if tag == 'f' and 'f' in blocks:
                    blocks['f'].append([_vertex_index(token, count)
                                        for token in tokens[1:]])
                elif tag in blocks:
                    data = [float(token) for token in tokens[1:]]
                    blocks[tag] = _array_append(blocks[tag], data)
            except ValueError as error:
                raise ValueError(f'line {lineno}: {error}') from error

            if tag == 'v':
                count += 1

    if len(args) == 1:
        return blocks[args[0]]

    # Dictionary values are iterated over in insertion order.
    return tuple(blocks.values())


def write(filename, *, f=None, name=None, **data):
    """ Write to file.

    Parameters
    ----------
    filename : str
        Name of output file.
    f : list[list[int]], optional
        Face definitions, 0-based vertex indices.
    name : str, optional
        Object name, written as 'o' statement.
    **data
        Keyword arguments.


    Data blocks to be stored in the file are passed via keyword arguments:

    >>> write('output-file.obj', v=points, f=faces)

    This assumes that ``points`` can be interpreted as a 2-dimensional
    array. The contents of each row are written to a line that starts
    with the given tag. Floats are written in shortest round-trip form.
    """
    faces = [] if f is None else f

    with open(filename, 'w') as file:
        file.write('# qemesh\n')

        if name is not None:
            file.write(f'o {name}\n')

        for key, value in data.items():
            for row in value:
                file.write(key)

                for element in row:
                    file.write(f' {float(element)!r}')

                file.write('\n')

        for face in faces:
            file.write('f')

            for v in face:
                file.write(f' {int(v) + 1}')

            file.write('\n')
