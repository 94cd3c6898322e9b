from sim_macho.mach_header import *
