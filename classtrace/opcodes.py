"""Static JVM domain data: access flags, opcodes, type codes and frame tags."""

from __future__ import annotations

from typing import Dict, Tuple

# ---------------------------------------------------------------------------
# Access flags
# ---------------------------------------------------------------------------

ACC_PUBLIC = 0x0001
ACC_PRIVATE = 0x0002
ACC_PROTECTED = 0x0004
ACC_STATIC = 0x0008
ACC_FINAL = 0x0010
ACC_SUPER = 0x0020
ACC_SYNCHRONIZED = 0x0020
ACC_VOLATILE = 0x0040
ACC_BRIDGE = 0x0040
ACC_TRANSIENT = 0x0080
ACC_VARARGS = 0x0080
ACC_NATIVE = 0x0100
ACC_INTERFACE = 0x0200
ACC_ABSTRACT = 0x0400
ACC_STRICT = 0x0800
ACC_SYNTHETIC = 0x1000
ACC_ANNOTATION = 0x2000
ACC_ENUM = 0x4000

# Pseudo flag raised by the reader when a ``Deprecated`` attribute is present.
# It lives above the 16 bits used by the class-file format.
ACC_DEPRECATED = 0x20000

OBJECT_CLASS = "java/lang/Object"

# ---------------------------------------------------------------------------
# Opcodes
# ---------------------------------------------------------------------------

OPCODE_NAMES: Tuple[str, ...] = tuple(
    """
    NOP ACONST_NULL ICONST_M1 ICONST_0 ICONST_1 ICONST_2 ICONST_3 ICONST_4
    ICONST_5 LCONST_0 LCONST_1 FCONST_0 FCONST_1 FCONST_2 DCONST_0 DCONST_1
    BIPUSH SIPUSH LDC LDC_W LDC2_W ILOAD LLOAD FLOAD DLOAD ALOAD
    ILOAD_0 ILOAD_1 ILOAD_2 ILOAD_3 LLOAD_0 LLOAD_1 LLOAD_2 LLOAD_3
    FLOAD_0 FLOAD_1 FLOAD_2 FLOAD_3 DLOAD_0 DLOAD_1 DLOAD_2 DLOAD_3
    ALOAD_0 ALOAD_1 ALOAD_2 ALOAD_3 IALOAD LALOAD FALOAD DALOAD AALOAD
    BALOAD CALOAD SALOAD ISTORE LSTORE FSTORE DSTORE ASTORE
    ISTORE_0 ISTORE_1 ISTORE_2 ISTORE_3 LSTORE_0 LSTORE_1 LSTORE_2 LSTORE_3
    FSTORE_0 FSTORE_1 FSTORE_2 FSTORE_3 DSTORE_0 DSTORE_1 DSTORE_2 DSTORE_3
    ASTORE_0 ASTORE_1 ASTORE_2 ASTORE_3 IASTORE LASTORE FASTORE DASTORE
    AASTORE BASTORE CASTORE SASTORE POP POP2 DUP DUP_X1 DUP_X2 DUP2 DUP2_X1
    DUP2_X2 SWAP IADD LADD FADD DADD ISUB LSUB FSUB DSUB IMUL LMUL FMUL DMUL
    IDIV LDIV FDIV DDIV IREM LREM FREM DREM INEG LNEG FNEG DNEG ISHL LSHL
    ISHR LSHR IUSHR LUSHR IAND LAND IOR LOR IXOR LXOR IINC I2L I2F I2D L2I
    L2F L2D F2I F2L F2D D2I D2L D2F I2B I2C I2S LCMP FCMPL FCMPG DCMPL DCMPG
    IFEQ IFNE IFLT IFGE IFGT IFLE IF_ICMPEQ IF_ICMPNE IF_ICMPLT IF_ICMPGE
    IF_ICMPGT IF_ICMPLE IF_ACMPEQ IF_ACMPNE GOTO JSR RET TABLESWITCH
    LOOKUPSWITCH IRETURN LRETURN FRETURN DRETURN ARETURN RETURN GETSTATIC
    PUTSTATIC GETFIELD PUTFIELD INVOKEVIRTUAL INVOKESPECIAL INVOKESTATIC
    INVOKEINTERFACE INVOKEDYNAMIC NEW NEWARRAY ANEWARRAY ARRAYLENGTH ATHROW
    CHECKCAST INSTANCEOF MONITORENTER MONITOREXIT WIDE MULTIANEWARRAY IFNULL
    IFNONNULL GOTO_W JSR_W
    """.split()
)

OPCODES: Dict[str, int] = {name: value for value, name in enumerate(OPCODE_NAMES)}

BIPUSH = OPCODES["BIPUSH"]
SIPUSH = OPCODES["SIPUSH"]
LDC = OPCODES["LDC"]
LDC_W = OPCODES["LDC_W"]
LDC2_W = OPCODES["LDC2_W"]
ILOAD = OPCODES["ILOAD"]
ALOAD = OPCODES["ALOAD"]
ILOAD_0 = OPCODES["ILOAD_0"]
ALOAD_3 = OPCODES["ALOAD_3"]
ISTORE = OPCODES["ISTORE"]
ASTORE = OPCODES["ASTORE"]
ISTORE_0 = OPCODES["ISTORE_0"]
ASTORE_3 = OPCODES["ASTORE_3"]
IINC = OPCODES["IINC"]
IFEQ = OPCODES["IFEQ"]
GOTO = OPCODES["GOTO"]
JSR = OPCODES["JSR"]
RET = OPCODES["RET"]
TABLESWITCH = OPCODES["TABLESWITCH"]
LOOKUPSWITCH = OPCODES["LOOKUPSWITCH"]
GETSTATIC = OPCODES["GETSTATIC"]
PUTFIELD = OPCODES["PUTFIELD"]
INVOKEVIRTUAL = OPCODES["INVOKEVIRTUAL"]
INVOKESPECIAL = OPCODES["INVOKESPECIAL"]
INVOKESTATIC = OPCODES["INVOKESTATIC"]
INVOKEINTERFACE = OPCODES["INVOKEINTERFACE"]
INVOKEDYNAMIC = OPCODES["INVOKEDYNAMIC"]
NEW = OPCODES["NEW"]
NEWARRAY = OPCODES["NEWARRAY"]
ANEWARRAY = OPCODES["ANEWARRAY"]
CHECKCAST = OPCODES["CHECKCAST"]
INSTANCEOF = OPCODES["INSTANCEOF"]
WIDE = OPCODES["WIDE"]
MULTIANEWARRAY = OPCODES["MULTIANEWARRAY"]
IFNULL = OPCODES["IFNULL"]
IFNONNULL = OPCODES["IFNONNULL"]
GOTO_W = OPCODES["GOTO_W"]
JSR_W = OPCODES["JSR_W"]
RETURN = OPCODES["RETURN"]

# ---------------------------------------------------------------------------
# NEWARRAY element types
# ---------------------------------------------------------------------------

ARRAY_TYPE_NAMES: Dict[int, str] = {
    4: "T_BOOLEAN",
    5: "T_CHAR",
    6: "T_FLOAT",
    7: "T_DOUBLE",
    8: "T_BYTE",
    9: "T_SHORT",
    10: "T_INT",
    11: "T_LONG",
}

# ---------------------------------------------------------------------------
# Stack map frames
# ---------------------------------------------------------------------------

F_NEW = -1
F_FULL = 0
F_APPEND = 1
F_CHOP = 2
F_SAME = 3
F_SAME1 = 4

FRAME_KIND_NAMES: Dict[int, str] = {
    F_NEW: "NEW",
    F_FULL: "FULL",
    F_APPEND: "APPEND",
    F_CHOP: "CHOP",
    F_SAME: "SAME",
    F_SAME1: "SAME1",
}

TOP = 0
INTEGER = 1
FLOAT = 2
DOUBLE = 3
LONG = 4
NULL = 5
UNINITIALIZED_THIS = 6

VERIFICATION_TYPE_NAMES: Dict[int, str] = {
    TOP: "T",
    INTEGER: "I",
    FLOAT: "F",
    DOUBLE: "D",
    LONG: "J",
    NULL: "N",
    UNINITIALIZED_THIS: "UNINITIALIZED_THIS",
}

# ---------------------------------------------------------------------------
# Method handle kinds
# ---------------------------------------------------------------------------

HANDLE_KIND_NAMES: Dict[int, str] = {
    1: "H_GETFIELD",
    2: "H_GETSTATIC",
    3: "H_PUTFIELD",
    4: "H_PUTSTATIC",
    5: "H_INVOKEVIRTUAL",
    6: "H_INVOKESTATIC",
    7: "H_INVOKESPECIAL",
    8: "H_NEWINVOKESPECIAL",
    9: "H_INVOKEINTERFACE",
}
