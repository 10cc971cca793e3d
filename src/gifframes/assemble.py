''' Palette lookup from color indices to RGBA8 pixels. '''

#--- Constants ---
COLORS_MAX = 256
#Drawn for indices the palette does not cover
FALLBACK_COLOR = (255, 0, 255)
TRANSPARENT = (0, 0, 0, 0)

def assemble_rgba(indices, palette, trans=None, fallback=FALLBACK_COLOR):
    ''' Map color indices through the palette into an RGBA8 buffer.
        The transparent index becomes (0, 0, 0, 0); indices outside the
        palette, or every index when there is no palette, get the fallback
        color. All other pixels are opaque.
    '''
    lookup = [tuple(fallback) + (255,)] * COLORS_MAX
    for i, color in enumerate((palette or [])[:COLORS_MAX]):
        lookup[i] = tuple(color) + (255,)
    if trans is not None and 0 <= trans < COLORS_MAX:
        lookup[trans] = TRANSPARENT

    #One translate per channel, interleaved into the output
    indices = bytes(indices)
    out = bytearray(len(indices) * 4)
    for channel in range(4):
        table = bytes(color[channel] for color in lookup)
        out[channel::4] = indices.translate(table)
    return bytes(out)
