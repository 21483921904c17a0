"""
# clxstrip, CLX archives for humans.

A CLX archive stores animations as groups of frames addressed by offsets; this
package reads it, removes groups from it and writes it back with every offset
recalculated.

Three basic operations are defined for the archive and its sub components:

 1. unpack(): reading the binary data and build a high-level representation
    of that. The component seeks where its data is, since the offsets are
    not necessarily contiguous.

 2. relayout(): trigger a recursive layout "negotiation" between a component
    and its subcomponents so to have offset and size set in the correct way.
    It returns the size of the component.

 3. pack(): encode the high-level representation into binary data, writing
    each subcomponent at its offset. If not indicated explicitly a packing
    also implies a relayouting.
"""
