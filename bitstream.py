"""
Byte <-> bit conversion for program input and output.

Bits are little-endian within a byte: bit 0 of each group of 8 is the
least significant bit.
"""


def to_bit_stream(data):
    bits = []
    for byte in bytes(data):
        for i in range(8):
            bits.append((byte >> i) & 1)
    return bits


def from_bit_stream(bits):
    """
    Pack bits back into bytes, 8 at a time.
    A trailing partial group is zero-padded on the high end.
    """
    bits = list(bits)
    output = bytearray()
    for i in range(0, len(bits), 8):
        value = 0
        for j, bit in enumerate(bits[i:i + 8]):
            if bit:
                value |= (1 << j)
        output.append(value)
    return bytes(output)


def bits_to_str(bits):
    return "".join("1" if bit else "0" for bit in bits)
