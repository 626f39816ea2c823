from .matrix import (CoeffPos, SparseMatrix, inner_product, scalar_vector_mult,
                     sparse_inner_product, sparse_vector_matrix_mult)
from .snark import EK, PP, VK, PESubspaceSnark, SubspaceSnark
