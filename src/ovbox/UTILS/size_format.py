# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Byte counts rendered the way `numfmt --to=iec --suffix=B` renders them.
"""

IEC_UNITS = ["K", "M", "G", "T", "P", "E", "Z", "Y"]


def _ceil_div(numerator: int, denominator: int) -> int:
    return -(-numerator // denominator)


def human_size(num_bytes: int) -> str:
    """
    Converts a byte count to IEC units, rounding away from zero.

    Values below 10 units keep one decimal: 1536 -> '1.5KB', 1610612736 -> '1.5GB'.
    Larger values are whole numbers: 123456789 -> '118MB'. Below 1024: '512B'.

    :param num_bytes: Size in bytes.
    :return: Human readable size.
    """
    num_bytes = int(num_bytes)
    if num_bytes < 1024:
        return f"{num_bytes}B"

    unit = 0
    scale = 1024
    while num_bytes >= scale * 1024 and unit < len(IEC_UNITS) - 1:
        scale *= 1024
        unit += 1

    tenths = _ceil_div(num_bytes * 10, scale)
    if tenths < 100:
        return f"{tenths // 10}.{tenths % 10}{IEC_UNITS[unit]}B"

    whole = _ceil_div(num_bytes, scale)
    if whole >= 1024 and unit < len(IEC_UNITS) - 1:
        return f"1.0{IEC_UNITS[unit + 1]}B"
    return f"{whole}{IEC_UNITS[unit]}B"
