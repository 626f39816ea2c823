#| # Serialization
#| Keys and proofs are written field by field in declaration order.
#|
#|     G1 point     x || y, big-endian, each coordinate the width of the base
#|                  field; the point at infinity is all zero bytes
#|     G2 point     x.c0 || x.c1 || y.c0 || y.c1
#|     integer      u64, little-endian
#|     sequence     u64 length, then the elements
#|
#| Decoding checks that every point lies in the prime-order subgroup of its
#| curve and that the input is consumed exactly.
import struct

from .curves import is_identity
from .data_structures import (Proof, ProofWithLink, ProvingKey, ProvingKeyCommon,
                              ProvingKeyWithLink, VerifyingKey, VerifyingKeyWithLink)
from .errors import SerializationError
from .link import EK, PP, VK

_U64 = struct.Struct("<Q")


def _coord_size(engine):
    return (engine.curve.FQ.field_modulus.bit_length() + 7) // 8


class _Writer(object):
    def __init__(self, engine):
        self.engine = engine
        self.size = _coord_size(engine)
        self.buf = bytearray()

    def u64(self, n):
        self.buf += _U64.pack(n)

    def _coord(self, n):
        self.buf += int(n).to_bytes(self.size, 'big')

    def g1(self, pt):
        if is_identity(pt):
            self.buf += bytes(2 * self.size)
            return
        x, y, _ = self.engine.to_affine(pt)
        self._coord(x.n)
        self._coord(y.n)

    def g2(self, pt):
        if is_identity(pt):
            self.buf += bytes(4 * self.size)
            return
        x, y, _ = self.engine.to_affine(pt)
        for c in x.coeffs + y.coeffs:
            self._coord(c)

    def seq(self, items, write):
        self.u64(len(items))
        for item in items:
            write(item)

    def getvalue(self):
        return bytes(self.buf)


class _Reader(object):
    def __init__(self, engine, data):
        self.engine = engine
        self.size = _coord_size(engine)
        self.data = memoryview(bytes(data))
        self.pos = 0

    def _take(self, n):
        if self.pos + n > len(self.data):
            raise SerializationError("unexpected end of input at byte %d" % self.pos)
        chunk = self.data[self.pos:self.pos + n]
        self.pos += n
        return bytes(chunk)

    def u64(self):
        return _U64.unpack(self._take(_U64.size))[0]

    def _coord(self):
        n = int.from_bytes(self._take(self.size), 'big')
        if n >= self.engine.curve.FQ.field_modulus:
            raise SerializationError("coordinate is not a field element")
        return n

    def _check(self, pt):
        if not self.engine.is_in_subgroup(pt):
            raise SerializationError("point is not in the prime-order subgroup")
        return pt

    def g1(self):
        x, y = self._coord(), self._coord()
        FQ = self.engine.curve.FQ
        if x == 0 and y == 0:
            return self.engine.Z1
        return self._check((FQ(x), FQ(y), FQ.one()))

    def g2(self):
        coords = [self._coord() for _ in range(4)]
        FQ2 = self.engine.curve.FQ2
        if not any(coords):
            return self.engine.Z2
        x = FQ2(coords[:2])
        y = FQ2(coords[2:])
        return self._check((x, y, FQ2.one()))

    def seq(self, read):
        n = self.u64()
        # every element takes at least one coordinate
        if n * self.size > len(self.data) - self.pos:
            raise SerializationError("sequence length %d exceeds the input" % n)
        return [read() for _ in range(n)]

    def finish(self):
        if self.pos != len(self.data):
            raise SerializationError("%d trailing bytes" % (len(self.data) - self.pos))


def _encode(engine, write_fn, obj):
    w = _Writer(engine)
    write_fn(w, obj)
    return w.getvalue()


def _decode(engine, read_fn, data):
    r = _Reader(engine, data)
    obj = read_fn(r)
    r.finish()
    return obj


def _write_vk(w, vk):
    w.g1(vk.alpha_g1)
    w.g2(vk.beta_g2)
    w.g2(vk.gamma_g2)
    w.g2(vk.delta_g2)
    w.seq(vk.gamma_abc_g1, w.g1)
    w.g1(vk.eta_gamma_inv_g1)
    w.u64(vk.num_committed_witnesses)


def _read_vk(r):
    alpha_g1 = r.g1()
    beta_g2 = r.g2()
    gamma_g2 = r.g2()
    delta_g2 = r.g2()
    gamma_abc_g1 = r.seq(r.g1)
    eta_gamma_inv_g1 = r.g1()
    num_committed_witnesses = r.u64()
    if num_committed_witnesses >= len(gamma_abc_g1):
        raise SerializationError("%d committed witnesses leave no room for the constant "
                                 "input in %d bases"
                                 % (num_committed_witnesses, len(gamma_abc_g1)))
    return VerifyingKey(alpha_g1=alpha_g1, beta_g2=beta_g2, gamma_g2=gamma_g2,
                        delta_g2=delta_g2, gamma_abc_g1=gamma_abc_g1,
                        eta_gamma_inv_g1=eta_gamma_inv_g1,
                        num_committed_witnesses=num_committed_witnesses)


def _write_common(w, common):
    w.g1(common.beta_g1)
    w.g1(common.delta_g1)
    w.g1(common.eta_delta_inv_g1)
    w.seq(common.a_query, w.g1)
    w.seq(common.b_g1_query, w.g1)
    w.seq(common.b_g2_query, w.g2)
    w.seq(common.h_query, w.g1)
    w.seq(common.l_query, w.g1)


def _read_common(r):
    return ProvingKeyCommon(
        beta_g1=r.g1(),
        delta_g1=r.g1(),
        eta_delta_inv_g1=r.g1(),
        a_query=r.seq(r.g1),
        b_g1_query=r.seq(r.g1),
        b_g2_query=r.seq(r.g2),
        h_query=r.seq(r.g1),
        l_query=r.seq(r.g1),
    )


def _write_link_vk(w, vk_link):
    _write_vk(w, vk_link.groth16_vk)
    pp = vk_link.link_pp
    w.u64(pp.l)
    w.u64(pp.t)
    w.g1(pp.g1)
    w.g2(pp.g2)
    w.seq(vk_link.link_bases, w.g1)
    w.seq(vk_link.link_vk.c, w.g2)
    w.g2(vk_link.link_vk.a)


def _read_link_vk(r):
    groth16_vk = _read_vk(r)
    link_pp = PP(l=r.u64(), t=r.u64(), g1=r.g1(), g2=r.g2())
    link_bases = r.seq(r.g1)
    link_vk = VK(c=r.seq(r.g2), a=r.g2())
    return VerifyingKeyWithLink(groth16_vk=groth16_vk, link_pp=link_pp,
                                link_bases=link_bases, link_vk=link_vk)


def _write_proof(w, proof):
    if proof.d is None:
        raise SerializationError("cannot serialize a proof without its witness commitment")
    w.g1(proof.a)
    w.g2(proof.b)
    w.g1(proof.c)
    w.g1(proof.d)


def _read_proof(r):
    return Proof(a=r.g1(), b=r.g2(), c=r.g1(), d=r.g1())


def serialize_verifying_key(engine, vk):
    return _encode(engine, _write_vk, vk)


def deserialize_verifying_key(engine, data):
    return _decode(engine, _read_vk, data)


def serialize_proving_key(engine, pk):
    def write(w, pk):
        _write_vk(w, pk.vk)
        _write_common(w, pk.common)
    return _encode(engine, write, pk)


def deserialize_proving_key(engine, data):
    def read(r):
        return ProvingKey(vk=_read_vk(r), common=_read_common(r))
    return _decode(engine, read, data)


def serialize_verifying_key_with_link(engine, vk_link):
    return _encode(engine, _write_link_vk, vk_link)


def deserialize_verifying_key_with_link(engine, data):
    return _decode(engine, _read_link_vk, data)


def serialize_proving_key_with_link(engine, pk):
    def write(w, pk):
        _write_link_vk(w, pk.vk)
        _write_common(w, pk.common)
        w.seq(pk.link_ek.p, w.g1)
    return _encode(engine, write, pk)


def deserialize_proving_key_with_link(engine, data):
    def read(r):
        vk = _read_link_vk(r)
        common = _read_common(r)
        return ProvingKeyWithLink(vk=vk, common=common, link_ek=EK(p=r.seq(r.g1)))
    return _decode(engine, read, data)


def serialize_proof(engine, proof):
    return _encode(engine, _write_proof, proof)


def deserialize_proof(engine, data):
    return _decode(engine, _read_proof, data)


def serialize_proof_with_link(engine, proof):
    def write(w, proof):
        _write_proof(w, proof)
        w.g1(proof.link_d)
        w.g1(proof.link_pi)
    return _encode(engine, write, proof)


def deserialize_proof_with_link(engine, data):
    def read(r):
        proof = _read_proof(r)
        return ProofWithLink(a=proof.a, b=proof.b, c=proof.c, d=proof.d,
                             link_d=r.g1(), link_pi=r.g1())
    return _decode(engine, read, data)
